from __future__ import annotations
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import asyncio
import inspect
import warnings
from typing import Any

from .engine import Engine, default_engine
from .errors import ValidationError
from .logging import logger
from .reason import Reason, Outcome, CONFIRMED, REJECTED, CANCELLED
from .result import Ok, Err, Settled, Value, Rebind, HandlerResult


log = logger()


Disposer = Callable[[], Awaitable[Any] | Any]
Handler = Callable[[Any], Any]


def _noop():
    return None


async def _await_maybe(x: Awaitable[Any] | Any) -> Any:
    if inspect.isawaitable(x):
        return await x
    return x


async def _settle(future: asyncio.Future[Outcome]) -> Settled[Outcome]:
    try:
        return Ok(await asyncio.shield(future))
    except Exception as e:
        return Err(e)


async def _finally(future: asyncio.Future[Outcome], cleanup: Disposer) -> Outcome:
    """Wait for `future` to settle, run `cleanup` to completion, then pass on
    the original outcome or error. An error from `cleanup` takes its place."""
    settled = await _settle(future)
    try:
        await _await_maybe(cleanup())
    except Exception as e:
        log.debug("cleanup failed with `%r`, replacing %s", e, settled)
        raise
    return settled.unwrap()


def _classify(result: Any) -> HandlerResult[Any]:
    if isinstance(result, Confirmer):
        return Rebind(result)
    return Value(result)


@dataclass
class Resolver:
    """Settles the `Confirmer` it was created for. The first call to
    `confirm`, `reject`, `cancel` or `error` wins, later calls do nothing.
    `dispose` registers the cleanup function; the last one registered runs."""
    _future: asyncio.Future[Outcome]
    _disposer: Disposer = _noop

    def _resolve(self, reason: Reason, value: Any):
        if self._future.done():
            log.debug("ignoring `%s`, confirmer already settled", reason)
            return
        log.debug("resolved %s with %r", reason, value)
        self._future.set_result(Outcome(reason, value))

    def confirm(self, value: Any = None):
        self._resolve(CONFIRMED, value)

    def reject(self, value: Any = None):
        self._resolve(REJECTED, value)

    def cancel(self, value: Any = None):
        self._resolve(CANCELLED, value)

    def error(self, err: Exception):
        """Settle on the failure path. Only exception instances are accepted;
        anything else raises `TypeError` to the caller and leaves the
        confirmer unsettled."""
        if not isinstance(err, Exception):
            raise TypeError(f"`error` expects an exception instance, got {err!r}")
        if self._future.done():
            log.debug("ignoring error `%r`, confirmer already settled", err)
            return
        log.debug("failed with `%r`", err)
        self._future.set_exception(err)

    def dispose(self, fn: Disposer):
        self._disposer = fn


class Confirmer:
    """A tri-state counterpart of a future. It settles once, either to an
    `Outcome` whose reason is confirmed, rejected or cancelled, or to an
    exception (a hard failure).

    The initializer receives a `Resolver` and is called right away:

        Confirmer(lambda resolver: resolver.confirm("yes"))

    The `on_confirmed`, `on_rejected` and `on_cancelled` methods register a
    handler for one reason and return a new `Confirmer`, so they can be
    chained. `on_done` runs for every outcome, including hard failures.
    `then`, `catch` and `await` leave the chain and expose the raw `Outcome`.

    Confirmers need an `Engine`. When none is given, the default is the
    running asyncio event loop; outside of a running loop construction fails
    with `ConfigurationError` before the initializer is called.
    """
    _engine: Engine
    _future: asyncio.Future[Outcome]
    _initializing: asyncio.Future[Any] | None = None

    def __init__(
        self,
        init_fn: Callable[[Resolver], Awaitable[Any] | Any],
        *,
        engine: Engine | None = None,
    ):
        self._engine = engine or default_engine()
        resolver = Resolver(self._engine.create())
        try:
            result = init_fn(resolver)
            if inspect.isawaitable(result):
                self._initializing = self._engine.spawn(self._run_initializer(result, resolver))
        except Exception as e:
            resolver.error(e)
        self._future = self._engine.spawn(_finally(resolver._future, lambda: resolver._disposer()))

    @staticmethod
    async def _run_initializer(result: Awaitable[Any], resolver: Resolver):
        try:
            await result
        except Exception as e:
            resolver.error(e)

    @classmethod
    def _derive(cls, future: asyncio.Future[Outcome], engine: Engine) -> Confirmer:
        confirmer = cls.__new__(cls)
        confirmer._engine = engine
        confirmer._future = future
        return confirmer

    def _gate(self, reason: Reason, fn: Handler) -> Confirmer:
        async def gate() -> Outcome:
            outcome = await asyncio.shield(self._future)
            if outcome.reason is not reason:
                return outcome
            result = fn(outcome.value)
            while True:
                match _classify(result):
                    case Rebind(confirmer):
                        return await confirmer
                    case Value(value) if inspect.isawaitable(value):
                        result = await value
                    case Value(value):
                        return Outcome(reason, value)

        return Confirmer.resolve(self._engine.spawn(gate()), engine=self._engine)

    def on_confirmed(self, fn: Handler) -> Confirmer:
        """Call `fn(value)` when confirmed ("OK" button, correct credentials).

        If `fn` returns a `Confirmer`, the chain continues with that
        confirmer's outcome, which may carry a different reason. Any other
        return value (awaited if needed) replaces the value and keeps the
        reason."""
        return self._gate(CONFIRMED, fn)

    def on_rejected(self, fn: Handler) -> Confirmer:
        """Call `fn(value)` when rejected ("No" button, bad password). See
        `on_confirmed` for how the return value is used."""
        return self._gate(REJECTED, fn)

    def on_cancelled(self, fn: Handler) -> Confirmer:
        """Call `fn(value)` when cancelled. See `on_confirmed` for how the
        return value is used."""
        return self._gate(CANCELLED, fn)

    def on_canceled(self, fn: Handler) -> Confirmer:
        warnings.warn(
            "`on_canceled` is deprecated, use `on_cancelled`",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.on_cancelled(fn)

    def on_done(self, fn: Disposer) -> Confirmer:
        """Call `fn()` once this confirmer settles, whatever the outcome,
        hard failures included. Used to close dialogs or remove stale
        handlers. Downstream handlers see the original outcome only after
        `fn` (and its awaitable, if it returns one) has completed."""
        return Confirmer.resolve(self._engine.spawn(_finally(self._future, fn)), engine=self._engine)

    def then(
        self,
        on_fulfilled: Callable[[Outcome], Any] | None = None,
        on_rejected: Callable[[Exception], Any] | None = None,
    ) -> asyncio.Future[Any]:
        """Leave the chain: returns a plain future of whatever the handlers
        return. `on_fulfilled` receives the raw `Outcome`, `on_rejected` the
        exception. A missing handler passes its side through."""
        async def then() -> Any:
            match await _settle(self._future):
                case Ok(outcome) if on_fulfilled is not None:
                    return await _await_maybe(on_fulfilled(outcome))
                case Err(error) if on_rejected is not None:
                    return await _await_maybe(on_rejected(error))
                case settled:
                    return settled.unwrap()

        return self._engine.spawn(then())

    def catch(self, fn: Callable[[Exception], Any]) -> asyncio.Future[Any]:
        return self.then(None, fn)

    def __await__(self):
        # cancelling a consumer must not cancel this confirmer
        return asyncio.shield(self._future).__await__()

    @classmethod
    def resolve(cls, source: Any, *, engine: Engine | None = None) -> Confirmer:
        """Turn `source` into a `Confirmer`.

        * a `Confirmer` is returned as is;
        * an awaitable becomes the underlying future of a new confirmer;
        * anything else becomes the settled value of a new confirmer.

        The settled value has to be an outcome record: an `Outcome`, or a
        mapping or object with a `reason` (one of "confirmed", "rejected" or
        "cancelled") and an optional `value`. Anything else fails the new
        confirmer with `ValidationError`.
        """
        if isinstance(source, Confirmer):
            return source
        engine = engine or default_engine()

        async def validate() -> Outcome:
            record = await engine.coerce(source)
            try:
                return Outcome.coerce(record)
            except ValidationError as e:
                log.debug("coercion failed: %s", e)
                raise

        return cls._derive(engine.spawn(validate()), engine)


@dataclass
class ConfirmerFactory:
    """Creates confirmers on one fixed `Engine`, e.g. from loop callbacks
    where no event loop is running in the calling frame."""
    engine: Engine

    def __call__(self, init_fn: Callable[[Resolver], Awaitable[Any] | Any]) -> Confirmer:
        return Confirmer(init_fn, engine=self.engine)

    def resolve(self, source: Any) -> Confirmer:
        return Confirmer.resolve(source, engine=self.engine)
