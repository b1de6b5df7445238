"""Utility helpers shared by the folio configuration loader."""

from __future__ import annotations

import typing as typ

from .models import ImageConfig, NavLinkConfig, SiteConfigError


def _normalize_list(value: str | list[object] | None) -> list[str]:
    """Normalize a comma string or list into non-empty stripped strings."""
    if isinstance(value, str):
        return [segment.strip() for segment in value.split(",") if segment.strip()]
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return normalized
    return []


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_markdown(value: object | None, *, field: str) -> str | None:
    """Return Markdown text unchanged, raising SiteConfigError for non-strings."""
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f"'{field}' must be a Markdown string."
        raise SiteConfigError(msg)
    return value


def _optional_int(value: object | None, *, field: str) -> int | None:
    """Return ``value`` as an int, raising SiteConfigError when it is not one."""
    if value is None:
        return None
    if isinstance(value, bool):
        msg = f"'{field}' must be an integer."
        raise SiteConfigError(msg)
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"'{field}' must be an integer."
        raise SiteConfigError(msg) from exc


def _normalize_route(value: object, *, field: str) -> str:
    """Return a route with a single leading slash and no trailing slash."""
    text = _optional_str(value)
    if text is None:
        msg = f"'{field}' requires a route."
        raise SiteConfigError(msg)
    if "://" in text:
        msg = f"'{field}' must be a site route, not a URL: {text}"
        raise SiteConfigError(msg)
    stripped = text.strip("/")
    return f"/{stripped}" if stripped else "/"


def _build_nav_links(
    entries: list[typ.Mapping[str, object]] | None, *, section: str
) -> list[NavLinkConfig]:
    """Build link configurations, recursing into dropdown ``children``."""
    links: list[NavLinkConfig] = []
    match entries:
        case list() as items:
            iterable = items
        case None:
            return links
        case _:
            msg = f"'{section}' links must be a list."
            raise SiteConfigError(msg)
    for entry in iterable:
        match entry:
            case {"label": label, **rest}:
                pass
            case _:
                msg = f"Each '{section}' link requires a 'label'."
                raise SiteConfigError(msg)
        children = _build_nav_links(rest.get("children"), section=section)
        href = _optional_str(rest.get("href"))
        page = _optional_str(rest.get("page"))
        if not children and not (href or page):
            msg = f"'{section}' link '{label}' requires 'href', 'page' or 'children'."
            raise SiteConfigError(msg)
        links.append(
            NavLinkConfig(
                label=str(label),
                href=href,
                page=page,
                children=children,
            )
        )
    return links


def _build_images(entries: object, *, section: str) -> list[ImageConfig]:
    """Build image configurations for a page."""
    if entries is None:
        return []
    if not isinstance(entries, list):
        msg = f"'{section}' images must be a list."
        raise SiteConfigError(msg)
    images: list[ImageConfig] = []
    for entry in entries:
        match entry:
            case str() as src:
                images.append(ImageConfig(src=src))
            case {"src": src, **rest}:
                images.append(
                    ImageConfig(
                        src=str(src),
                        description=_optional_str(rest.get("description")),
                        max_height=_optional_int(
                            rest.get("max_height"), field=f"{section}.max_height"
                        ),
                    )
                )
            case _:
                msg = f"Each '{section}' image requires a 'src'."
                raise SiteConfigError(msg)
    return images


__all__ = [
    "_build_images",
    "_build_nav_links",
    "_normalize_list",
    "_normalize_route",
    "_optional_int",
    "_optional_markdown",
    "_optional_str",
]
