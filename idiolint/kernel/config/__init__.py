"""Configuration models for idiolint."""

from idiolint.kernel.config.models import LintConfig, LoggingConfig

__all__ = ["LintConfig", "LoggingConfig"]
