"""Concurrent multi-file runs."""

from idiolint.kernel.orchestration.runner import (
    CancellationToken,
    FileReport,
    LintRunner,
    RunReport,
)

__all__ = ["CancellationToken", "FileReport", "LintRunner", "RunReport"]
