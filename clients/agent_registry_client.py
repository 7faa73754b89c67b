from typing import Any, Dict, Optional
from urllib.parse import quote

from loguru import logger

from draco.config import RegistryConfig

from .base_client import BaseAPIClient


class AgentRegistryClient(BaseAPIClient):
    """Client for the service that knows which agents are registered"""

    def __init__(self, config: RegistryConfig):
        super().__init__(base_url=config.base_url, timeout=config.timeout)

    def agent_exists(self, agent_name: str) -> bool:
        """Any failure to reach the registry counts as "not registered"."""
        try:
            response = self._sync_request(method="get", endpoint=f"/check-agent/{quote(agent_name, safe='')}")
        except Exception as e:
            logger.error(f"Agent check failed | Agent: {agent_name} | Error: {str(e)}")
            return False

        exists = bool(response.get("exists")) if isinstance(response, dict) else False
        logger.debug(f"Agent check | Agent: {agent_name} | Exists: {exists}")
        return exists

    def get_agent_data(self, agent_name: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._sync_request(method="get", endpoint=f"/api/agent/{quote(agent_name, safe='')}")
        except Exception as e:
            logger.error(f"Agent data fetch failed | Agent: {agent_name} | Error: {str(e)}")
            return None
        return response if isinstance(response, dict) else None
