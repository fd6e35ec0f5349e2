"""Media-type negotiation for ``content`` maps.

Request bodies and content-bearing parameters declare their schemas per media
type.  Only JSON-compatible media types are understood, so
:func:`select_media_type` picks the first entry, in declaration order, whose
key matches one of:

* ``application/*json`` (``application/json``, ``application/problem+json``, ...)
* ``text/*plain``
* ``*/*`` (literally; it is not a glob here)

Keys are compared case-insensitively and media-type parameters
(``; charset=utf-8``) are ignored.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any

from spectools.exceptions import SpecParsingError, UnsupportedContentTypeError

_MEDIA_TYPE_GLOBS = ("application/*json", "text/*plain")
_WILDCARD = "*/*"


def is_supported_media_type(media_type: str) -> bool:
    """Return True if *media_type* is a JSON-compatible media type key."""
    essence = media_type.split(";", 1)[0].strip().lower()
    if essence == _WILDCARD:
        return True
    return any(fnmatchcase(essence, pattern) for pattern in _MEDIA_TYPE_GLOBS)


def select_media_type(content: Any) -> tuple[str, dict[str, Any]]:
    """Pick the first supported media type of a ``content`` map.

    Args:
        content: The ``content`` object, mapping media type to
            *Media Type Object*.

    Returns:
        A ``(media_type, media_type_object)`` tuple.

    Raises:
        SpecParsingError: If *content* or the selected entry is not a mapping.
        UnsupportedContentTypeError: If no key is JSON-compatible.
    """
    if not isinstance(content, dict):
        raise SpecParsingError("'content' must be a mapping of media types")

    for media_type, media in content.items():
        if is_supported_media_type(media_type):
            if not isinstance(media, dict):
                raise SpecParsingError(f"Media type '{media_type}' must be an object")
            return media_type, media

    raise UnsupportedContentTypeError(list(content))
