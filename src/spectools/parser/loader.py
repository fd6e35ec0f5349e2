"""Load OpenAPI documents from a URL, local file, or stdin, and gate on version.

This module handles all I/O for fetching raw OpenAPI documents and turning
them into Python dictionaries.  Local files are decoded according to their
extension (``.json`` as JSON, ``.yaml``/``.yml`` as YAML); any other extension
is rejected.  Remote and stdin content is decoded as JSON first, then YAML.

The public functions are:

* :func:`load_spec` -- Load and decode a document from any supported source.
* :func:`validate_openapi_version` -- The version gate: only ``3.0.x``
  documents get past it.
* :func:`parse_raw_spec` -- Run the version gate, then check the document
  against the :class:`~spectools.models.RawSpec` skeleton.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from spectools.exceptions import SpecLoadError, SpecParsingError, UnsupportedVersionError
from spectools.models import RawSpec

logger = logging.getLogger(__name__)

_SUPPORTED_VERSION = re.compile(r"3\.0\..")

_JSON_SUFFIXES = (".json",)
_YAML_SUFFIXES = (".yaml", ".yml")


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The decoded document as a dictionary.

    Raises:
        SpecLoadError: If the source cannot be loaded or decoded.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a document from stdin, decoding it as JSON, then YAML."""
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecLoadError("No input received from stdin")

    return _parse_content(content, hint="")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S).

    The response ``content-type`` header is used as a decoding hint.

    Raises:
        SpecLoadError: If the URL cannot be fetched or decoded.
    """
    logger.debug("Fetching document from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecLoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        SpecLoadError: If the extension is not recognised, or the file
            cannot be read or decoded.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix in _JSON_SUFFIXES:
        hint = "json"
    elif suffix in _YAML_SUFFIXES:
        hint = "yaml"
    else:
        raise SpecLoadError(
            f"Unsupported document extension '{file_path.suffix}' for {path}; "
            "expected .json, .yaml or .yml"
        )

    if not file_path.is_file():
        raise SpecLoadError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecLoadError(f"Document is empty: {path}")

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Decode content as JSON or YAML.

    With ``hint="json"`` or ``hint="yaml"`` only that decoder is tried.
    Without a hint JSON is tried first, then YAML.

    Raises:
        SpecLoadError: If the content cannot be decoded or its root is not
            a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecLoadError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML: {exc}"
        if json_error is not None:
            msg = (
                "Failed to decode document as JSON or YAML"
                f"\n  JSON error: {json_error}\n  YAML error: {exc}"
            )
        raise SpecLoadError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        found = type(result).__name__ if result is not None else "empty document"
        raise SpecLoadError(f"Document must be a JSON/YAML object (got {found})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Only ``3.0.<x>`` is accepted, where ``<x>`` is exactly one character.

    Args:
        spec: The decoded document.

    Returns:
        The version string (e.g., ``'3.0.3'``).

    Raises:
        UnsupportedVersionError: If ``openapi`` is missing, not a string, or
            not a 3.0.x version.
    """
    if "swagger" in spec and "openapi" not in spec:
        raise UnsupportedVersionError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x documents are supported."
        )

    version = spec.get("openapi")
    if version is None:
        raise UnsupportedVersionError(
            "Missing 'openapi' field. Is this an OpenAPI 3.0.x document?"
        )
    if not isinstance(version, str):
        raise UnsupportedVersionError(
            f"The 'openapi' field must be a string, got {type(version).__name__} "
            f"({version!r})"
        )
    if not _SUPPORTED_VERSION.fullmatch(version):
        raise UnsupportedVersionError(
            f"Unsupported OpenAPI version: {version}. "
            "Only OpenAPI 3.0.x is supported."
        )
    return version


def parse_raw_spec(spec: dict[str, Any]) -> RawSpec:
    """Run the version gate, then validate the document skeleton.

    Args:
        spec: The decoded document, as returned by :func:`load_spec`.

    Returns:
        The document as a :class:`~spectools.models.RawSpec`.

    Raises:
        UnsupportedVersionError: See :func:`validate_openapi_version`.
        SpecParsingError: If the document does not match the OpenAPI
            structure (e.g. ``paths`` is a list).
    """
    validate_openapi_version(spec)
    try:
        return RawSpec.model_validate(spec)
    except ValidationError as exc:
        raise SpecParsingError(f"Document does not match the OpenAPI structure: {exc}") from exc
