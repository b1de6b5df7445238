r"""Render crawler directives (``robots.txt``) from disallow rules.

Each rule names a crawler and the path prefixes it may not visit. A rule with
no paths blocks that crawler from the whole site. Friendly crawler names such
as ``google`` or ``chatGPT`` are translated to the user-agent tokens the
crawlers announce; any other name is used verbatim.

Example
-------
>>> from folio_pages.robots import DisallowRule, render_robots
>>> print(render_robots([DisallowRule("chatGPT")]), end="")
User-agent: GPTBot
Disallow: /
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import CrawlerRuleConfig

KNOWN_CRAWLERS: dict[str, str] = {
    "apple": "Applebot",
    "baidu": "Baiduspider",
    "bing": "Bingbot",
    "chatgpt": "GPTBot",
    "duckduckgo": "DuckDuckBot",
    "google": "Googlebot",
    "yahoo": "Slurp",
    "yandex": "YandexBot",
}


@dc.dataclass(frozen=True, slots=True)
class DisallowRule:
    """Paths a crawler may not visit; an empty ``paths`` blocks everything."""

    agent: str
    paths: tuple[str, ...] = ()

    @property
    def user_agent(self) -> str:
        return KNOWN_CRAWLERS.get(self.agent.lower(), self.agent)

    @property
    def disallowed(self) -> tuple[str, ...]:
        """Return the disallowed prefixes, ``("/",)`` when none are listed."""
        return self.paths or ("/",)

    @classmethod
    def from_config(cls, rule: CrawlerRuleConfig) -> DisallowRule:
        return cls(agent=rule.agent, paths=tuple(rule.paths))


def render_robots(
    rules: cabc.Sequence[DisallowRule], *, sitemap_url: str | None = None
) -> str:
    """Return ``robots.txt`` text for ``rules``.

    Parameters
    ----------
    rules : Sequence[DisallowRule]
        Rules in the order their groups should appear.
    sitemap_url : str, optional
        Absolute sitemap URL appended as a ``Sitemap:`` line.

    Returns
    -------
    str
        Newline-terminated directives. With no rules every crawler is allowed.
    """
    groups: list[str] = []
    for rule in rules:
        lines = [f"User-agent: {rule.user_agent}"]
        lines.extend(f"Disallow: {path}" for path in rule.disallowed)
        groups.append("\n".join(lines))
    if not groups:
        groups.append("User-agent: *\nAllow: /")
    if sitemap_url:
        groups.append(f"Sitemap: {sitemap_url}")
    return "\n\n".join(groups) + "\n"


__all__ = ["KNOWN_CRAWLERS", "DisallowRule", "render_robots"]
