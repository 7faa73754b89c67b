from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from clients.agent_registry_client import AgentRegistryClient
from clients.bitquery_client import BitqueryClient
from decorators import monitor_execution

from .config import Config
from .errors import AgentNotRegistered, MissingParameter, TransportError, UnsafeQueryValue
from .formatter import ResponseFormatter
from .intents import Intent, classify
from .params import extract_parameters
from .queries import QueryBuilder

ERROR_SUBJECTS = {
    Intent.MARKET_CAP: "market cap data",
    Intent.TOP_HOLDERS: "top holders",
    Intent.TOP_BUYERS: "top buyers",
    Intent.TRENDING: "trending tokens",
}


@dataclass
class Reply:
    intent: Optional[Intent]
    lines: List[str]
    records: List[Dict[str, Any]] = field(default_factory=list)
    is_error: bool = False
    headline: Optional[str] = None


class QuestionHandler:
    """
    Answers one question for one agent:
    verify agent -> classify -> extract parameters -> build query -> execute -> format.

    Every stage that cannot continue ends the question with a single diagnostic line.
    """

    def __init__(
        self,
        registry: AgentRegistryClient,
        analytics: BitqueryClient,
        builder: Optional[QueryBuilder] = None,
        formatter: Optional[ResponseFormatter] = None,
    ):
        self.registry = registry
        self.analytics = analytics
        self.builder = builder or QueryBuilder()
        self.formatter = formatter or ResponseFormatter()

    @classmethod
    def from_config(cls, config: Config) -> "QuestionHandler":
        return cls(
            registry=AgentRegistryClient(config.registry),
            analytics=BitqueryClient(config.bitquery),
            builder=QueryBuilder(trending_window_hours=config.trending_window_hours),
            formatter=ResponseFormatter(trending_window_hours=config.trending_window_hours),
        )

    async def ask(self, agent_name: str, question: str) -> Reply:
        """Main entry point; unexpected failures are logged and re-raised."""
        try:
            return await self.handle_question(agent_name, question)
        except Exception as e:
            logger.error(f"Question failed | Agent: {agent_name} | Question: {question} | Error: {str(e)}")
            raise

    @monitor_execution("QuestionHandler.handle_question")
    async def handle_question(self, agent_name: str, question: str) -> Reply:
        try:
            self.verify_agent(agent_name)
        except AgentNotRegistered as e:
            return Reply(intent=None, lines=[e.message], is_error=True)

        intent = classify(question)
        logger.info(f"Question classified | Agent: {agent_name} | Intent: {intent.value}")
        if intent == Intent.UNSUPPORTED:
            return Reply(intent=intent, lines=[f'Unsupported question: "{question}"'])

        try:
            params = extract_parameters(intent, question)
            doc = self.builder.build(intent, params)
        except MissingParameter as e:
            logger.info(f"Missing parameter | Intent: {intent.value} | Field: {e.field}")
            return Reply(intent=intent, lines=[e.message])
        except UnsafeQueryValue as e:
            logger.warning(f"Rejected query value | Intent: {intent.value} | Field: {e.field}")
            return Reply(intent=intent, lines=[e.message], is_error=True)

        try:
            records = await self.analytics.execute(doc)
        except TransportError as e:
            return Reply(
                intent=intent,
                lines=[f"Error fetching {ERROR_SUBJECTS[intent]} from Bitquery: {e.message}"],
                is_error=True,
            )

        headline = self.formatter.headline(intent, params) if records else None
        return Reply(
            intent=intent,
            lines=self.formatter.format(intent, records, params),
            records=records,
            headline=headline,
        )

    def verify_agent(self, agent_name: str) -> None:
        if not self.registry.agent_exists(agent_name):
            raise AgentNotRegistered(agent_name)

        agent_data = self.registry.get_agent_data(agent_name) or {}
        personality = agent_data.get("personality") or "neutral"
        logger.debug(f"Agent verified | Agent: {agent_name} | Personality: {personality}")

    async def close(self):
        await self.analytics.close()
        await self.registry.close()
