"""Utilities for rendering element trees, Markdown and full site documents."""

from .document import DocumentBuilder, create_environment
from .link_rewriter import ContentLinkExtension
from .models import AccessibilityWarning, RenderedDocument, RenderedFragment
from .renderer import HtmlContentRenderer
from .tree import ElementTreeRenderer

__all__ = [
    "AccessibilityWarning",
    "ContentLinkExtension",
    "DocumentBuilder",
    "ElementTreeRenderer",
    "HtmlContentRenderer",
    "RenderedDocument",
    "RenderedFragment",
    "create_environment",
]
