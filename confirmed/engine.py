from __future__ import annotations
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Coroutine
from dataclasses import dataclass
import asyncio
import inspect
from typing import Any

from .errors import ConfigurationError


class Engine(ABC):
    """The single-settle future machinery a `Confirmer` is layered on.

    An engine has to create pending futures, schedule continuations (any
    exception raised by a continuation fails the future it returns) and
    move plain values or awaitables into the success channel of a future.
    """

    @abstractmethod
    def create(self) -> asyncio.Future[Any]:
        ...

    @abstractmethod
    def spawn(self, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Future[Any]:
        ...

    def coerce(self, source: Awaitable[Any] | Any) -> asyncio.Future[Any]:
        async def _coerce():
            if inspect.isawaitable(source):
                return await source
            return source

        return self.spawn(_coerce())


def running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise ConfigurationError(
            "No engine given and no event loop is running. Create confirmers "
            "from within a coroutine, or pass `engine=AsyncioEngine(loop)`."
        ) from e


@dataclass
class AsyncioEngine(Engine):
    loop: asyncio.AbstractEventLoop | None = None

    def __post_init__(self):
        if self.loop is None:
            self.loop = running_loop()

    def create(self) -> asyncio.Future[Any]:
        return self.loop.create_future()

    def spawn(self, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Future[Any]:
        return self.loop.create_task(coroutine)


def default_engine() -> Engine:
    return AsyncioEngine()
