from argparse import ArgumentParser
import sys
from typing import Optional
import argh  # type: ignore
import asyncio

from rich_argparse import RichHelpFormatter

from .errors import ConfirmerError
from .logging import logger, configure_logger
from .prompt import ask
from .reason import Outcome, CONFIRMED, REJECTED, CANCELLED
from .version import __version__

log = logger()


EXIT_CODES = {CONFIRMED: 0, REJECTED: 1, CANCELLED: 2}
EXIT_FAILURE = 3

DEFAULTS = {"yes": CONFIRMED, "no": REJECTED}


async def main(question: str, default: Optional[str], timeout: Optional[float], read=None) -> Outcome:
    def cancelled(value):
        log.debug("cancelled (%s)", value)
        return value

    return await (
        ask(question, default=DEFAULTS.get(default or ""), timeout=timeout, read=read)
        .on_cancelled(cancelled)
        .on_done(lambda: log.debug("question `%s` answered", question))
    )


@argh.arg("question", help="the question to ask")
@argh.arg("--default", choices=list(DEFAULTS), help="answer taken on an empty reply")
@argh.arg("-t", "--timeout", type=float, help="cancel after this many seconds")
@argh.arg("-v", "--version", help="print version number and exit")
@argh.arg("--debug", help="more verbose logging")
def confirmed(
    question: str,
    *,
    default: Optional[str] = None,
    timeout: Optional[float] = None,
    version: bool = False,
    debug: bool = False
):
    """Ask a yes/no question; the exit status is 0 when confirmed, 1 when
    rejected, 2 when cancelled and 3 on failure."""
    if version:
        print(f"Confirmed {__version__}")
        sys.exit(0)

    configure_logger(debug)
    try:
        outcome = asyncio.run(main(question, default, timeout))
    except KeyboardInterrupt:
        sys.exit(EXIT_CODES[CANCELLED])
    except ConfirmerError as e:
        log.error(f"Failed: {e}")
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        log.exception(f"Failed: {e}")
        sys.exit(EXIT_FAILURE)

    log.debug(f"answer: {outcome.reason}")
    sys.exit(EXIT_CODES[outcome.reason])


def cli():
    parser = ArgumentParser(formatter_class=RichHelpFormatter)
    argh.set_default_command(parser, confirmed)
    argh.dispatch(parser)


if __name__ == "__main__":
    cli()
