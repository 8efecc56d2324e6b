import logging

from rich.console import Console
from rich.logging import RichHandler

from streampix.settings import settings

TEXT_FORMAT = "%(name)s: %(message)s"


def configure_logging() -> None:
    """Send log records to stderr, below the interactive menu.

    Text mode renders through rich so warnings share the menu's styling; set
    ``STREAMPIX_LOG_JSON`` for one JSON object per record instead.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # qrcode's Pillow backend logs every PNG chunk at DEBUG.
    logging.getLogger("PIL").setLevel(logging.WARNING)
