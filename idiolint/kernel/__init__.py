"""idiolint kernel: the public API of the engine.

User-space code (``idiolint.cli`` and applications embedding the linter)
should import from ``idiolint.kernel`` rather than from its submodules.

The exports are grouped by category:
- Syntax trees
- Rules and registry
- Analysis and results
- Fixes and reports
- Runs
- Configuration
- Exceptions
"""

# ============================================================================
# 1. Syntax trees
# ============================================================================
from idiolint.kernel.syntax import (
    NodeDraft,
    NodeKind,
    PositionIndex,
    SourceUnit,
    Span,
    SyntaxNode,
    SyntaxTree,
    TreeBuilder,
    build_tree,
)

# ============================================================================
# 2. Rules and registry
# ============================================================================
from idiolint.kernel.linting import (
    BaseRule,
    Match,
    PredicateRule,
    Rule,
    RuleContext,
    RuleRegistry,
)

# ============================================================================
# 3. Analysis and results
# ============================================================================
from idiolint.kernel.linting import (
    AnalysisResult,
    Applicability,
    Category,
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    Fix,
    Severity,
    TextEdit,
    TreeWalker,
    analyze,
    analyze_with_rules,
)

# ============================================================================
# 4. Fixes and reports
# ============================================================================
from idiolint.kernel.linting import (
    FixConflict,
    FixOutcome,
    ReportRow,
    apply_fixes,
    build_report_rows,
    report_row,
)

# ============================================================================
# 5. Runs
# ============================================================================
from idiolint.kernel.orchestration import CancellationToken, FileReport, LintRunner, RunReport

# ============================================================================
# 6. Configuration
# ============================================================================
from idiolint.kernel.config import LintConfig, LoggingConfig

# ============================================================================
# 7. Exceptions
# ============================================================================
from idiolint.kernel.exceptions import (
    ConfigurationError,
    ContextWindowError,
    DuplicateRuleIdError,
    IdiolintError,
    ParseError,
    ParseUnavailableError,
    RuleInternalError,
    UnknownRuleError,
    ValidationError,
)

__all__ = [
    # Syntax trees
    "NodeDraft",
    "NodeKind",
    "PositionIndex",
    "SourceUnit",
    "Span",
    "SyntaxNode",
    "SyntaxTree",
    "TreeBuilder",
    "build_tree",
    # Rules and registry
    "BaseRule",
    "Match",
    "PredicateRule",
    "Rule",
    "RuleContext",
    "RuleRegistry",
    # Analysis and results
    "AnalysisResult",
    "Applicability",
    "Category",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "Fix",
    "Severity",
    "TextEdit",
    "TreeWalker",
    "analyze",
    "analyze_with_rules",
    # Fixes and reports
    "FixConflict",
    "FixOutcome",
    "ReportRow",
    "apply_fixes",
    "build_report_rows",
    "report_row",
    # Runs
    "CancellationToken",
    "FileReport",
    "LintRunner",
    "RunReport",
    # Configuration
    "LintConfig",
    "LoggingConfig",
    # Exceptions
    "ConfigurationError",
    "ContextWindowError",
    "DuplicateRuleIdError",
    "IdiolintError",
    "ParseError",
    "ParseUnavailableError",
    "RuleInternalError",
    "UnknownRuleError",
    "ValidationError",
]
