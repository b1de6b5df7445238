"""Shared dataclasses used by the rendering pipeline."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class AccessibilityWarning:
    """An image rendered without a description.

    Attributes
    ----------
    source : str
        Page or content item whose tree contains the image.
    node_path : str
        Location of the image node within the tree.
    src : str
        Image reference, to help find the asset being described.
    """

    source: str
    node_path: str
    src: str

    def describe(self) -> str:
        return f"{self.source}: image '{self.src}' at {self.node_path} has no description"


@dc.dataclass(frozen=True, slots=True)
class RenderedFragment:
    """HTML for an element tree plus the warnings raised while rendering it."""

    html: str
    warnings: tuple[AccessibilityWarning, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class RenderedDocument:
    """A complete output document destined for ``route``."""

    name: str
    route: str
    html: str
    warnings: tuple[AccessibilityWarning, ...] = ()


__all__ = ["AccessibilityWarning", "RenderedDocument", "RenderedFragment"]
