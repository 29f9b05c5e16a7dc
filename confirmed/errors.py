from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any


class ConfirmerError(Exception):
    def __str__(self):
        return "Unknown confirmer error."


@dataclass
class ConfigurationError(ConfirmerError):
    msg: str

    def __str__(self):
        return self.msg


@dataclass
class ValidationError(ConfirmerError):
    got: Any

    @property
    def reason(self) -> Any:
        if isinstance(self.got, Mapping):
            return self.got.get("reason")
        return getattr(self.got, "reason", None)

    def __str__(self):
        return f"Unknown resolution reason {self.reason}"
