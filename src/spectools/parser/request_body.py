"""Normalise an operation's ``requestBody`` schema."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from spectools.exceptions import SpecParsingError
from spectools.models import NormalizedSchema, RawRequestBody
from spectools.parser.content import select_media_type
from spectools.parser.resolver import ComponentTable
from spectools.parser.schema import SchemaNormalizer

logger = logging.getLogger(__name__)


class RequestBodyExtractor:
    """Select a JSON-compatible media type of a request body and normalise its schema.

    Args:
        table: Component table used to resolve ``#/components/requestBodies``
            references.
        normalizer: The visit's schema normaliser.
    """

    def __init__(self, table: ComponentTable, normalizer: SchemaNormalizer) -> None:
        self._table = table
        self._normalizer = normalizer

    def extract(self, request_body: Any) -> Optional[NormalizedSchema]:
        """Return the normalised body schema.

        Returns ``None`` when the selected media type declares no schema.

        Raises:
            SpecParsingError: If the body is structurally invalid.
            UnsupportedContentTypeError: If no media type is JSON-compatible.
        """
        resolved = self._table.resolve_node(request_body)
        try:
            body = RawRequestBody.model_validate(resolved)
        except ValidationError as exc:
            raise SpecParsingError(f"Invalid request body object: {exc}") from exc

        media_type, media = select_media_type(body.content)
        if "schema" not in media:
            logger.debug("Media type '%s' declares no schema", media_type)
            return None
        return self._normalizer.normalize(media["schema"])
