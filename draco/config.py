import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_BITQUERY_API_URL = "https://streaming.bitquery.io/eap"
DEFAULT_AGENT_REGISTRY_URL = "https://notavailableyet.com"
MAX_TRENDING_WINDOW_HOURS = 24 * 365


@dataclass(frozen=True)
class BitqueryConfig:
    api_url: str = DEFAULT_BITQUERY_API_URL
    api_key: str = ""
    timeout: float = 30.0


@dataclass(frozen=True)
class RegistryConfig:
    base_url: str = DEFAULT_AGENT_REGISTRY_URL
    timeout: float = 30.0


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class Config:
    """Configuration for the question pipeline"""

    bitquery: BitqueryConfig = field(default_factory=BitqueryConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    trending_window_hours: float = 24.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        timeout = _float_env("DRACO_REQUEST_TIMEOUT_SECONDS", "30")
        window = _float_env("DRACO_TRENDING_WINDOW_HOURS", "24")
        if not 0 < window <= MAX_TRENDING_WINDOW_HOURS:
            raise ConfigError(
                f"DRACO_TRENDING_WINDOW_HOURS must be in (0, {MAX_TRENDING_WINDOW_HOURS}], got {window}"
            )

        return cls(
            bitquery=BitqueryConfig(
                api_url=os.getenv("BITQUERY_API_URL", DEFAULT_BITQUERY_API_URL),
                api_key=os.getenv("BITQUERY_API_KEY", ""),
                timeout=timeout,
            ),
            registry=RegistryConfig(
                base_url=os.getenv("AGENT_REGISTRY_URL", DEFAULT_AGENT_REGISTRY_URL).rstrip("/"),
                timeout=timeout,
            ),
            trending_window_hours=window,
            log_level=os.getenv("DRACO_LOG_LEVEL", "INFO").upper(),
        )
