"""Cross-cutting infrastructure shared by every layer."""

from idiolint.core.logging import configure_logging, get_logger, reset_logging

__all__ = ["configure_logging", "get_logger", "reset_logging"]
