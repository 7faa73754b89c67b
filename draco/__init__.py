from .errors import DracoError
from .intents import Intent, classify

__all__ = ["DracoError", "Intent", "classify"]
