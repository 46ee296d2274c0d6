"""Core module initialization with logging setup."""

from .logging_config import setup_logging
from .settings import settings

# Initialize logging when the core module is imported
setup_logging(settings.log_level.upper())
