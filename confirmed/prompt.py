from __future__ import annotations
from collections.abc import Callable
import threading
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .confirmer import Confirmer, Resolver
from .engine import AsyncioEngine
from .logging import logger
from .reason import Reason, CONFIRMED, REJECTED, CANCELLED


log = logger()


ANSWERS: dict[str, Reason] = {
    "y": CONFIRMED, "yes": CONFIRMED,
    "n": REJECTED, "no": REJECTED,
    "c": CANCELLED, "cancel": CANCELLED, "q": CANCELLED, "quit": CANCELLED,
}


def interpret(reply: Optional[str], default: Optional[Reason] = None) -> Optional[Reason]:
    """Map a typed reply to a reason. An empty reply takes the default (or
    cancels without one), end of input cancels, and anything unrecognised
    gives `None` so the question can be asked again."""
    if reply is None:
        return CANCELLED
    reply = reply.strip().lower()
    if not reply:
        return default or CANCELLED
    return ANSWERS.get(reply)


def choices(default: Optional[Reason] = None) -> str:
    yes = "Y" if default is CONFIRMED else "y"
    no = "N" if default is REJECTED else "n"
    return f"[{yes}/{no}/c]"


def ask(
    question: str,
    *,
    default: Optional[Reason] = None,
    timeout: Optional[float] = None,
    read: Optional[Callable[[str], str]] = None,
) -> Confirmer:
    """Ask a yes/no question on the terminal.

    The reply is read on a daemon thread so that the event loop stays free;
    "yes" confirms, "no" rejects, "cancel", an empty reply without default or
    the end of input cancel. After `timeout` seconds the confirmer is
    cancelled with the value `"timeout"`; the thread is left waiting for a
    reply that nobody listens to anymore.
    """
    engine = AsyncioEngine()
    loop = engine.loop
    prompt = f"{question} {choices(default)} "
    read = read or (lambda p: Console(stderr=True).input(escape(p)))

    def init(resolver: Resolver):
        settle = {CONFIRMED: resolver.confirm, REJECTED: resolver.reject, CANCELLED: resolver.cancel}

        def reader():
            try:
                while True:
                    try:
                        reply = read(prompt)
                    except EOFError:
                        reply = None
                    if (reason := interpret(reply, default)) is not None:
                        break
                    log.info("please answer `yes`, `no` or `cancel`")
            except Exception as e:
                notify(resolver.error, e)
            else:
                notify(settle[reason], reply)

        def notify(fn, value):
            try:
                loop.call_soon_threadsafe(fn, value)
            except RuntimeError:
                log.debug("event loop closed before `%s` arrived", value)

        threading.Thread(target=reader, daemon=True, name="confirmed-prompt").start()

        if timeout is not None:
            timer = loop.call_later(timeout, resolver.cancel, "timeout")
            resolver.dispose(timer.cancel)

    return Confirmer(init, engine=engine)
