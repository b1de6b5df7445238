"""Exception taxonomy shared by the content, rendering, and publishing stages.

Every stage raises a subclass of :class:`FolioError` so the CLI can report a
single human-readable message and exit non-zero. Configuration problems use
:class:`~folio_pages.config.SiteConfigError` instead, which mirrors the
``ValueError`` family used by the YAML loader.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path


class FolioError(Exception):
    """Base class for build-time failures."""


class ContentLoadError(FolioError):
    """Raised when a content file is unreadable or has malformed metadata."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RenderError(FolioError):
    """Raised when an element tree contains an invalid node configuration.

    Attributes
    ----------
    node_path : str
        Location of the offending node, for example
        ``"Section[1] > ItemList[0] > Link"``.
    reason : str
        Description of what is wrong with the node.
    """

    def __init__(self, node_path: str, reason: str) -> None:
        self.node_path = node_path
        self.reason = reason
        super().__init__(f"{node_path}: {reason}")


@dc.dataclass(frozen=True, slots=True)
class BuildFailure:
    """A single page or content item that could not be loaded or rendered."""

    target: str
    error: Exception

    def describe(self) -> str:
        """Return a one-line description naming the target and the cause."""
        return f"{self.target}: {self.error}"


class BuildError(FolioError):
    """Raised when a build cannot complete; names every failing target."""

    def __init__(
        self, message: str, failures: cabc.Sequence[BuildFailure] = ()
    ) -> None:
        self.failures = tuple(failures)
        lines = [message, *(f"  - {failure.describe()}" for failure in self.failures)]
        super().__init__("\n".join(lines))


__all__ = [
    "BuildError",
    "BuildFailure",
    "ContentLoadError",
    "FolioError",
    "RenderError",
]
