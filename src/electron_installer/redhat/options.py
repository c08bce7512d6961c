"""Merges caller configuration over defaults derived from `package.json`."""

from collections.abc import Mapping
import re
import textwrap
from typing import Any

import structlog

from .models import (
    DEFAULT_CATEGORIES,
    DEFAULT_ICON,
    DEFAULT_NAME,
    DEFAULT_REQUIRES,
    DEFAULT_REVISION,
    DEFAULT_VERSION,
    DESCRIPTION_WRAP_WIDTH,
    PackageOptions,
)

logger = structlog.get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_PARENTHESIZED = re.compile(r"\(([^)]+)\)")
_ANGLED = re.compile(r"<([^>]+)>")
_URL = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://\S+$")

# Options that never come from the caller's configuration mapping.
_POSITIONAL = frozenset({"src", "dest"})

# Options holding sequences; a single string means one entry.
_LIST_OPTIONS = frozenset({"requires", "categories", "exclude"})


def normalize_key(key: str) -> str:
    """Maps `productName` style keys onto `product_name`."""
    return _CAMEL_BOUNDARY.sub("_", key.replace("-", "_")).lower()


def normalize_config(config: Mapping[str, Any] | None) -> dict[str, Any]:
    known = PackageOptions.field_names() - _POSITIONAL
    normalized: dict[str, Any] = {}
    for key, value in (config or {}).items():
        name = normalize_key(key)
        if name not in known:
            logger.warning("Ignoring unknown option", option=key)
            continue
        if value is None:
            continue
        if name in _LIST_OPTIONS and isinstance(value, str):
            value = (value,)
        normalized[name] = value
    return normalized


def homepage_from_author(author: Any) -> str | None:
    """
    Extracts a homepage from an npm `author` field, which is either a mapping
    with a `url` key or a string like `Name <email> (url)`.
    """
    if isinstance(author, Mapping):
        return author.get("url")
    if not isinstance(author, str):
        return None
    author = author.strip()
    match = _PARENTHESIZED.search(author)
    if match:
        return match.group(1).strip()
    match = _ANGLED.search(author)
    if match and _URL.match(match.group(1).strip()):
        return match.group(1).strip()
    if _URL.match(author):
        return author
    return None


def wrap_description(text: str, width: int = DESCRIPTION_WRAP_WIDTH) -> str:
    """Word-wraps each paragraph of `text` to at most `width` columns."""
    return "\n".join(
        textwrap.fill(
            line, width=width, break_long_words=True, break_on_hyphens=False
        )
        for line in text.splitlines()
    )


def metadata_layer(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Picks the option values `package.json` can supply."""
    layer = {
        normalize_key(key): metadata[key]
        for key in (
            "name",
            "productName",
            "genericName",
            "description",
            "productDescription",
            "version",
            "revision",
            "license",
            "homepage",
        )
        if metadata.get(key)
    }
    if "homepage" not in layer:
        homepage = homepage_from_author(metadata.get("author"))
        if homepage:
            layer["homepage"] = homepage
    return layer


def resolve_options(
    src: str,
    dest: str,
    config: Mapping[str, Any] | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> PackageOptions:
    """
    Builds the frozen options record. Precedence is explicit configuration,
    then values derived from `package.json`, then hardcoded fallbacks.
    """
    layer = {**metadata_layer(metadata or {}), **normalize_config(config)}

    name = layer.get("name") or DEFAULT_NAME
    product_name = layer.get("product_name") or name
    description = layer.get("description") or product_name
    product_description = layer.get("product_description") or description

    resolved = {
        "requires": DEFAULT_REQUIRES,
        "categories": DEFAULT_CATEGORIES,
        "icon": str(DEFAULT_ICON),
        **layer,
        "name": name,
        "bin": layer.get("bin") or (metadata or {}).get("name") or DEFAULT_NAME,
        "product_name": product_name,
        "generic_name": layer.get("generic_name") or product_name,
        "description": description,
        "product_description": wrap_description(str(product_description)),
        "version": str(layer.get("version") or DEFAULT_VERSION),
        "revision": str(layer.get("revision") or DEFAULT_REVISION),
    }
    options = PackageOptions(src=str(src), dest=str(dest), **resolved)
    logger.debug("Resolved package options", name=options.name, arch=options.arch)
    return options
