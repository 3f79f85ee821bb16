import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Install one stdout handler on the root logger; later calls only set the level."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(getattr(h, "_sortie", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._sortie = True
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
