"""Source unit loaders: from a file path to a parsed :class:`SourceUnit`."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from idiolint.compiler.parser import parse_source
from idiolint.core.logging import get_logger
from idiolint.kernel.exceptions import ParseError, ParseUnavailableError
from idiolint.kernel.syntax.tree import SourceUnit

logger = get_logger(__name__)


@runtime_checkable
class SourceLoader(Protocol):
    """Anything that can turn a path into a syntax tree.

    Implementations raise :class:`ParseUnavailableError` when no tree can be
    produced; the runner reports that file and moves on.
    """

    def load(self, path: str | Path) -> SourceUnit: ...


class ReaderLoader:
    """Loads files with the built-in reader.

    Parameters
    ----------
    encoding : str, default="utf-8"
        Text encoding of the source files
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, path: str | Path) -> SourceUnit:
        """Read and parse ``path``.

        Raises
        ------
        ParseUnavailableError
            If the file cannot be read, decoded or parsed
        """
        path_str = str(path)
        try:
            text = Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read {path}: {error}", path=path_str, error=str(e))
            raise ParseUnavailableError(path_str, str(e)) from e
        return self.load_text(text, path_str)

    def load_text(self, text: str, path: str = "<memory>") -> SourceUnit:
        """Parse an in-memory buffer.

        Raises
        ------
        ParseUnavailableError
            If the text cannot be parsed, including input nested too deeply
            for the recursive reader
        """
        try:
            unit = parse_source(text, path)
        except ParseError as e:
            logger.warning("Cannot parse {path}: {error}", path=path, error=str(e))
            raise ParseUnavailableError(path, str(e)) from e
        except RecursionError as e:
            logger.warning("Cannot parse {path}: nesting too deep", path=path)
            raise ParseUnavailableError(path, "nesting too deep") from e
        logger.debug("Parsed {path} into {count} nodes", path=path, count=len(unit.tree))
        return unit
