"""Configuration data models for idiolint."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from idiolint.kernel.linting.models import Category


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output

    Examples
    --------
    TOML configuration:

    ```toml
    [tool.idiolint.logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export IDIOLINT_LOG_LEVEL=DEBUG
    export IDIOLINT_LOG_FORMAT=json
    export IDIOLINT_LOG_FILE=/tmp/idiolint.log
    ```
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


class LintConfig(BaseModel):
    """Complete lint configuration.

    Attributes
    ----------
    select_categories : list[Category]
        Categories to run; empty means all
    select_rules : list[str]
        Rule ids to run; empty means all
    disable_rules : list[str]
        Rule ids removed after selection
    max_workers : int
        Files analysed concurrently
    unsafe_fixes : bool
        Also apply fixes marked unsafe when fixing
    logging : LoggingConfig
        Logging configuration

    Examples
    --------
    ```toml
    [tool.idiolint]
    select_categories = ["typing", "naming"]
    disable_rules = ["elaborate-union"]
    max_workers = 8

    [tool.idiolint.logging]
    level = "INFO"
    ```
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    select_categories: list[Category] = Field(
        default_factory=list, description="Categories to run (empty = all)"
    )
    select_rules: list[str] = Field(default_factory=list, description="Rule ids to run")
    disable_rules: list[str] = Field(default_factory=list, description="Rule ids to skip")
    max_workers: int = Field(default=4, ge=1, description="Concurrent files")
    unsafe_fixes: bool = Field(default=False, description="Apply unsafe fixes too")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("select_rules", "disable_rules")
    @classmethod
    def _strip_ids(cls, value: list[str]) -> list[str]:
        return [rule_id.strip() for rule_id in value if rule_id.strip()]

    @property
    def categories(self) -> frozenset[Category] | None:
        return frozenset(self.select_categories) or None

    @property
    def rule_ids(self) -> frozenset[str] | None:
        return frozenset(self.select_rules) or None
