"""
RenderWatch Asset Tag Helpers.

Stylesheet and script tag helpers exposed to templates. Sources under the
``.tmp/`` build directory are linked as if served from the site root.
Requires Python 3.11+.
"""

from collections.abc import Callable
from typing import Any

from markupsafe import Markup, escape

BUILD_DIR_PREFIX = ".tmp/"


def _attributes(attrs: dict[str, Any]) -> str:
    parts = []
    for name, value in attrs.items():
        if value is None or value is False:
            continue
        name = name.replace("_", "-")
        if value is True:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{escape(value)}"')
    return "".join(parts)


def _unique(sources: tuple[str, ...]) -> list[str]:
    return list(dict.fromkeys(sources))


class AssetTagHelpers:
    """Asset tag helpers handed to the renderer as template callables."""

    def __init__(self, build_dir_prefix: str = BUILD_DIR_PREFIX) -> None:
        self._build_dir_prefix = build_dir_prefix

    def _public_path(self, source: str) -> str:
        return source.replace(self._build_dir_prefix, "")

    def stylesheet_link_tag(self, *sources: str, **attrs: Any) -> Markup:
        """
        One ``<link rel="stylesheet">`` per unique source.

        Extra keyword arguments become attributes and override the defaults.
        """
        attrs.pop("protocol", None)
        tags = []
        for source in _unique(sources):
            tag_attrs = {
                "rel": "stylesheet",
                "media": "screen",
                "href": self._public_path(source),
                **attrs,
            }
            tags.append(f"<link{_attributes(tag_attrs)} />")
        return Markup("\n".join(tags))

    def javascript_include_tag(self, *sources: str, **attrs: Any) -> Markup:
        """One ``<script src>`` per unique source."""
        attrs.pop("protocol", None)
        attrs.pop("extname", None)
        tags = []
        for source in _unique(sources):
            tag_attrs = {"src": self._public_path(source), **attrs}
            tags.append(f"<script{_attributes(tag_attrs)}></script>")
        return Markup("\n".join(tags))

    def as_context(self) -> dict[str, Callable[..., Markup]]:
        """Helpers keyed by the names templates call them by."""
        return {
            "stylesheet_link_tag": self.stylesheet_link_tag,
            "javascript_include_tag": self.javascript_include_tag,
        }
