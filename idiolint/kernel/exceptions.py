"""Core exception hierarchy for idiolint.

All idiolint-specific exceptions inherit from IdiolintError so callers can
catch the whole family at once. Only registration-time defects are fatal to a
run; per-file and per-rule failures are converted into diagnostics by the
loader and the tree walker.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class IdiolintError(Exception):
    """Base exception for all idiolint errors.

    Catch this to handle all idiolint errors.
    """

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(IdiolintError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("pyproject.toml", "[tool.idiolint] must be a table")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the component with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(IdiolintError):
    """Raised when data validation fails.

    Examples
    --------
    Example usage::

        raise ValidationError("span", "start must not exceed end", value=(8, 3))
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


# ============================================================================
# Registry Errors
# ============================================================================


class DuplicateRuleIdError(IdiolintError):
    """Raised when a rule is registered under an id that is already taken.

    This is a configuration defect and is fatal: it must surface before any
    analysis starts.

    Examples
    --------
    Example usage::

        raise DuplicateRuleIdError("mutating-naming")
    """

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule id '{rule_id}' is already registered")
        self.rule_id = rule_id


class UnknownRuleError(IdiolintError):
    """Raised when a filter or lookup names a rule id that is not registered."""

    def __init__(self, rule_id: str, available: list[str] | None = None) -> None:
        msg = f"Rule '{rule_id}' not found"
        if available:
            msg += f". Available: {', '.join(available[:5])}"
            if len(available) > 5:
                msg += f" ... and {len(available) - 5} more"
        super().__init__(msg)
        self.rule_id = rule_id
        self.available = available


# ============================================================================
# Loader / Reader Errors
# ============================================================================


class ParseError(IdiolintError):
    """Raised by the reference reader when source text cannot be parsed.

    Attributes
    ----------
    offset : int
        Byte offset where parsing stopped
    line : int
        1-based line of the offending token
    column : int
        1-based column of the offending token
    """

    def __init__(self, reason: str, offset: int = 0, line: int = 1, column: int = 1) -> None:
        super().__init__(f"{reason} at line {line}, column {column}")
        self.reason = reason
        self.offset = offset
        self.line = line
        self.column = column


class ParseUnavailableError(IdiolintError):
    """Raised when the loader cannot produce a syntax tree for a source unit.

    The run continues; the loader reports the file through a single
    ``parse-unavailable`` diagnostic instead of a tree.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"No syntax tree for '{path}': {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Rule Errors
# ============================================================================


class RuleInternalError(IdiolintError):
    """Wraps an unexpected failure raised inside a rule's matcher or fixer.

    The tree walker creates this at its boundary and turns it into a single
    diagnostic, so the failure stays isolated to one rule and one node.
    """

    def __init__(
        self,
        rule_id: str,
        node_id: int,
        original_error: BaseException,
        stage: str = "matcher",
    ) -> None:
        self.rule_id = rule_id
        self.node_id = node_id
        self.original_error = original_error
        self.stage = stage
        prefix = f"Rule '{rule_id}'" if stage == "matcher" else f"Fixer of rule '{rule_id}'"
        super().__init__(
            f"{prefix} failed on node {node_id}: "
            f"{type(original_error).__name__}: {original_error}"
        )


class ContextWindowError(IdiolintError):
    """Raised when a rule asks for a node outside its bounded context window."""

    def __init__(self, node_id: int) -> None:
        super().__init__(f"Node {node_id} is outside the rule's context window")
        self.node_id = node_id

