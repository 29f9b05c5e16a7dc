from __future__ import annotations
from typing import TypeVar, Generic, TYPE_CHECKING
from dataclasses import dataclass

if TYPE_CHECKING:
    from .confirmer import Confirmer


T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Ok(Generic[R]):
    value: R

    def __bool__(self):
        return True

    def unwrap(self) -> R:
        return self.value


@dataclass
class Err:
    error: Exception

    def __bool__(self):
        return False

    def unwrap(self):
        raise self.error


Settled = Ok[R] | Err


@dataclass
class Value(Generic[T]):
    """Handler produced a plain (possibly awaitable) value; the reason is kept."""
    value: T


@dataclass
class Rebind:
    """Handler produced a sub-confirmer; its outcome replaces the current one."""
    confirmer: Confirmer


HandlerResult = Value[T] | Rebind
