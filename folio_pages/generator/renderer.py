"""Utilities for rendering markdown and syntax-highlighted code snippets."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_OPEN_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)(,[^\r\n]*)?[ \t]*$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
PLAIN_LANGUAGE = "text"


class HtmlContentRenderer:
    """Render markdown and code snippets with consistent styling."""

    def __init__(
        self,
        pygments_style: str = "monokai",
        languages: cabc.Iterable[str] | None = None,
    ) -> None:
        """Initialize a renderer with a pygments style and enabled languages.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        languages : Iterable[str], optional
            Fence languages that receive syntax highlighting. ``None`` enables
            every language Pygments knows; any other language renders as plain
            text.
        """
        self.pygments_style = pygments_style
        self.languages = (
            frozenset(language.lower() for language in languages)
            if languages is not None
            else None
        )
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def is_enabled(self, language: str | None) -> bool:
        if not language:
            return False
        return self.languages is None or language.lower() in self.languages

    def markdown(
        self, text: str, *, link_extension: Extension | None = None
    ) -> str:
        """Render markdown into HTML using the configured extensions."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
        ]
        if link_extension:
            extensions.append(link_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return self._annotate_codehilite(html, normalized)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Languages that are not enabled, or unknown to Pygments, fall back to
        the plain ``"text"`` lexer.
        """
        lang = language if self.is_enabled(language) else PLAIN_LANGUAGE
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lang = PLAIN_LANGUAGE
            lexer = get_lexer_by_name(PLAIN_LANGUAGE)
        html = highlight(code, lexer, self._formatter)
        return self._attach_language_attribute(html, lang)

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or PLAIN_LANGUAGE
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, PLAIN_LANGUAGE)
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _attach_language_attribute(html: str, language: str) -> str:
        """Add a single language attribute to an already highlighted block."""
        safe_lang = escape(language or PLAIN_LANGUAGE, quote=True)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html, 1)

    def _normalize_fenced_blocks(self, text: str) -> str:
        """Unindent fences, drop fence extras and demote disabled languages."""
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _relabel(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language if self.is_enabled(language) else PLAIN_LANGUAGE
            return f"{fence}{label}"

        return FENCE_OPEN_PATTERN.sub(_relabel, without_indent)


__all__ = ["CODE_BLOCK_PATTERN", "HtmlContentRenderer"]
