"""Configuration loader for idiolint.

Parses configuration into kernel models. Supports two config sources:

1. **kind: Config YAML**: loaded via explicit path or the
   ``IDIOLINT_CONFIG_PATH`` env var.
2. **pyproject.toml [tool.idiolint]**: auto-discovery fallback.

The engine never touches config file formats; it receives plain filters.
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from idiolint.core.logging import get_logger
from idiolint.kernel.config.models import LintConfig
from idiolint.kernel.exceptions import ConfigurationError

_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


def _split_list_env(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigLoader:
    """Loads and validates idiolint configuration files."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> LintConfig:
        """Load configuration from YAML or pyproject.toml.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        ConfigurationError
            If the file is malformed or fails validation
        """
        config_path = self._find_config_file(path)
        logger.info("Loading configuration from {path}", path=config_path)
        if config_path.suffix in (".yaml", ".yml"):
            data = self._load_yaml(config_path)
        else:
            data = self._load_toml(config_path)
        return self.parse(data, source=str(config_path))

    def parse(self, data: dict[str, Any], source: str = "<config>") -> LintConfig:
        """Validate raw config data after env substitution and overrides."""
        data = self._substitute_env_vars(data)
        data = self._apply_env_overrides(data)
        try:
            return LintConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigurationError(source, str(e)) from e

    def _load_yaml(self, config_path: Path) -> dict[str, Any]:
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(str(config_path), f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                str(config_path), f"expected a mapping, got {type(data).__name__}"
            )
        kind = data.get("kind")
        if kind != "Config":
            raise ConfigurationError(
                str(config_path), f"YAML config must use 'kind: Config', got 'kind: {kind}'"
            )
        spec = data.get("spec") or {}
        if not isinstance(spec, dict):
            raise ConfigurationError(str(config_path), "'spec' must be a mapping")
        return spec

    def _load_toml(self, config_path: Path) -> dict[str, Any]:
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(str(config_path), f"invalid TOML: {e}") from e

        section = data.get("tool", {}).get("idiolint")
        if section is None:
            if config_path.name == "pyproject.toml":
                logger.warning("No [tool.idiolint] section found in pyproject.toml, using defaults")
                return {}
            # standalone TOML file holding the settings at top level
            return data
        return section

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Discovery order:
        1. Explicit path argument
        2. ``IDIOLINT_CONFIG_PATH`` env var
        3. ``pyproject.toml`` with a ``[tool.idiolint]`` table in CWD or a parent

        Raises
        ------
        FileNotFoundError
            If no configuration file is found
        """
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config_path

        if env_path := os.getenv("IDIOLINT_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from IDIOLINT_CONFIG_PATH: {path}", path=config_path)
                return config_path
            logger.warning(
                "IDIOLINT_CONFIG_PATH set but file not found: {path}", path=config_path
            )

        current = Path.cwd()
        while True:
            pyproject = current / "pyproject.toml"
            if pyproject.exists():
                with pyproject.open("rb") as f:
                    try:
                        data = tomllib.load(f)
                    except tomllib.TOMLDecodeError:
                        data = {}
                if "idiolint" in data.get("tool", {}):
                    return pyproject
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            "set IDIOLINT_CONFIG_PATH, or add [tool.idiolint] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` references; unknown variables are kept."""
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable {var_name} not found, keeping placeholder",
                        var_name=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _apply_env_overrides(self, data: dict[str, Any]) -> dict[str, Any]:
        """Apply ``IDIOLINT_*`` overrides; environment wins over file values.

        - IDIOLINT_SELECT / IDIOLINT_DISABLE / IDIOLINT_CATEGORIES: comma lists
        - IDIOLINT_MAX_WORKERS: integer
        - IDIOLINT_UNSAFE_FIXES: boolean
        - IDIOLINT_LOG_LEVEL / IDIOLINT_LOG_FORMAT / IDIOLINT_LOG_FILE
        - IDIOLINT_LOG_COLOR / IDIOLINT_LOG_TIMESTAMP: boolean
        """
        data = dict(data)
        logging_data = dict(data.get("logging") or {})

        for env_name, key in (
            ("IDIOLINT_SELECT", "select_rules"),
            ("IDIOLINT_DISABLE", "disable_rules"),
            ("IDIOLINT_CATEGORIES", "select_categories"),
        ):
            if env_value := os.getenv(env_name):
                data[key] = _split_list_env(env_value)
                logger.debug("Overriding {key} from env", key=key)

        if env_workers := os.getenv("IDIOLINT_MAX_WORKERS"):
            data["max_workers"] = env_workers.strip()

        if env_unsafe := os.getenv("IDIOLINT_UNSAFE_FIXES"):
            try:
                data["unsafe_fixes"] = _parse_bool_env(env_unsafe)
            except ValueError as e:
                logger.warning("Invalid IDIOLINT_UNSAFE_FIXES value: {error}", error=str(e))

        if env_level := os.getenv("IDIOLINT_LOG_LEVEL"):
            logging_data["level"] = env_level.upper()
        if env_format := os.getenv("IDIOLINT_LOG_FORMAT"):
            logging_data["format"] = env_format.lower()
        if env_file := os.getenv("IDIOLINT_LOG_FILE"):
            logging_data["output_file"] = env_file

        for env_name, key in (
            ("IDIOLINT_LOG_COLOR", "use_color"),
            ("IDIOLINT_LOG_TIMESTAMP", "include_timestamp"),
        ):
            if env_value := os.getenv(env_name):
                try:
                    logging_data[key] = _parse_bool_env(env_value)
                except ValueError as e:
                    logger.warning(
                        "Invalid {env_name} value: {error}", env_name=env_name, error=str(e)
                    )

        if logging_data:
            data["logging"] = logging_data
        return data


def load_config(path: str | Path | None = None) -> LintConfig:
    """Load configuration from file, or defaults (with env overrides) if none is found."""
    loader = ConfigLoader()
    try:
        return loader.load_config_file(path)
    except FileNotFoundError:
        if path:
            raise
        logger.info("No configuration file found, using defaults")
        return loader.parse({})


def get_default_config() -> LintConfig:
    """Default configuration, ignoring files and environment."""
    return LintConfig()
