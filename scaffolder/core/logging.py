import logging
import sys


class ContextFormatter(logging.Formatter):
    """Custom formatter that handles optional entity and step fields."""
    def format(self, record):
        # Add default values for entity and step if not present
        if not hasattr(record, 'entity'):
            record.entity = '-'
        if not hasattr(record, 'step'):
            record.step = '-'
        return super().format(record)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [entity=%(entity)s step=%(step)s] - %(message)s"
    ))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
