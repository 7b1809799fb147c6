"""Registry mapping file extensions to analyzer factories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from codeir.core.validation import require_non_empty, require_non_null

if TYPE_CHECKING:
    from codeir.languages.base import CodeAnalyzer

logger = logging.getLogger(__name__)

AnalyzerFactory = Callable[[Path], "CodeAnalyzer"]


def get_file_extension(path: Path | str) -> str:
    """Return the lowercased text after the last dot of the file name.

    Names without a dot, or whose only dot is the first character
    (``.bashrc``), have no extension.
    """
    file_name = Path(path).name
    last_dot = file_name.rfind(".")
    return file_name[last_dot + 1 :].lower() if last_dot > 0 else ""


class AnalyzerRegistry:
    """Maps case-insensitive file extensions to analyzer factories.

    Registration is expected at start-up. Concurrent ``resolve`` calls are
    safe once registration is done; ``register`` must be serialized by the
    caller against everything else.
    """

    def __init__(self) -> None:
        self._factories: dict[str, AnalyzerFactory] = {}

    def register(self, extension: str, factory: AnalyzerFactory) -> None:
        """Register ``factory`` for ``extension``, replacing any previous one.

        The extension may be given with or without its leading dot.
        """
        require_non_empty(extension, "extension")
        require_non_null(factory, "factory")
        key = extension.strip().lstrip(".").lower()
        require_non_empty(key, "extension")

        if key in self._factories:
            logger.debug("Replacing analyzer factory for .%s", key)
        self._factories[key] = factory

    def resolve(self, path: Path | str, source_root: Path | None = None) -> CodeAnalyzer | None:
        """Build an analyzer for ``path``, or return None if none is registered.

        The factory receives ``source_root``, defaulting to the file's directory.
        """
        path = Path(path)
        factory = self._factories.get(get_file_extension(path))
        if factory is None:
            return None
        return factory(source_root if source_root is not None else path.parent)

    def supports(self, path: Path | str) -> bool:
        """Check if a factory is registered for the file's extension."""
        return get_file_extension(path) in self._factories

    def extensions(self) -> list[str]:
        """Return the registered extensions, sorted."""
        return sorted(self._factories)

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and extension.lstrip(".").lower() in self._factories

    def __len__(self) -> int:
        return len(self._factories)
