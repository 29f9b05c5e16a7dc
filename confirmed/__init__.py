from .reason import Reason, Outcome, CONFIRMED, REJECTED, CANCELLED
from .confirmer import Confirmer, ConfirmerFactory, Resolver
from .engine import Engine, AsyncioEngine
from .errors import ConfirmerError, ConfigurationError, ValidationError
from .prompt import ask
from .version import __version__

__all__ = [
    "Confirmer", "ConfirmerFactory", "Resolver", "Reason", "Outcome",
    "CONFIRMED", "REJECTED", "CANCELLED", "Engine", "AsyncioEngine",
    "ConfirmerError", "ConfigurationError", "ValidationError", "ask",
    "__version__",
]
