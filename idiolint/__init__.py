"""idiolint: idiom-aware diagnostics and mechanical fixes for Julia sources.

Typical use::

    from idiolint import ReaderLoader, analyze, default_registry

    unit = ReaderLoader().load("src/geometry.jl")
    result = analyze(unit.tree, default_registry(), path=unit.path)
"""

try:
    from importlib.metadata import version

    __version__ = version("idiolint")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

from idiolint.builtin.rules import default_registry
from idiolint.compiler import ReaderLoader, load_config, parse_source
from idiolint.kernel import (
    AnalysisResult,
    CancellationToken,
    Category,
    Diagnostic,
    LintRunner,
    RuleRegistry,
    Severity,
    analyze,
    apply_fixes,
)

__all__ = [
    "AnalysisResult",
    "CancellationToken",
    "Category",
    "Diagnostic",
    "LintRunner",
    "ReaderLoader",
    "RuleRegistry",
    "Severity",
    "__version__",
    "analyze",
    "apply_fixes",
    "default_registry",
    "load_config",
    "parse_source",
]
