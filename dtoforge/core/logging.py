import logging
import sys


class ContextFormatter(logging.Formatter):
    """Custom formatter that handles the optional model field."""
    def format(self, record):
        # Add a default value for model if not present
        if not hasattr(record, 'model'):
            record.model = '-'
        return super().format(record)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [model=%(model)s] - %(message)s"
    ))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
