from typing import List, Optional


class DracoError(Exception):
    """Base class for every failure that ends the handling of a question."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(DracoError):
    pass


class MissingParameter(DracoError):
    """The question does not carry a parameter its intent requires."""

    PROMPTS = {
        "term": "Please provide a valid search term.",
        "mintAddress": "Please provide a valid MintAddress in the question.",
    }

    def __init__(self, field: str):
        super().__init__(self.PROMPTS.get(field, f"Please provide a valid {field}."))
        self.field = field


class AgentNotRegistered(DracoError):
    def __init__(self, agent_name: str):
        super().__init__(f'Cannot process request. Agent "{agent_name}" is not registered.')
        self.agent_name = agent_name


class UnsafeQueryValue(DracoError):
    """A value extracted from the question cannot be placed in a query."""

    def __init__(self, field: str, value):
        super().__init__(f"Invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


class TransportError(DracoError):
    def __init__(self, reason: str, status: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status = status


class AnalyticsQueryError(TransportError):
    """The backend accepted the request but reported GraphQL errors."""

    def __init__(self, messages: List[str], status: Optional[int] = None):
        super().__init__(f"GraphQL errors: {', '.join(messages)}", status=status)
        self.messages = messages
