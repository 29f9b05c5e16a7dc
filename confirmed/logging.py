import logging
import sys
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme
from rich.console import Console


class OutcomeHighlighter(RegexHighlighter):
    """Bold back-ticked names, colour the three resolution reasons."""
    base_style = "confirmed."
    highlights = [
        r"`(?P<code>[^`]*)`",
        r"\b(?P<confirmed>confirmed)\b",
        r"\b(?P<rejected>rejected)\b",
        r"\b(?P<cancelled>cancelled)\b",
    ]


THEME = Theme({
    "confirmed.code": "bold",
    "confirmed.confirmed": "green",
    "confirmed.rejected": "red",
    "confirmed.cancelled": "yellow",
})


def logger():
    return logging.getLogger("confirmed")


def configure_logger(debug: bool, rich: bool = True):
    level = logging.DEBUG if debug else logging.INFO
    if rich:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True, theme=THEME),
            show_path=debug,
            highlighter=OutcomeHighlighter(),
        )
        logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                            handlers=[handler])
    else:
        logging.basicConfig(level=level, handlers=[logging.StreamHandler(sys.stdout)])
    logger().setLevel(level)
