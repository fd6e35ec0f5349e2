"""Tests for spectools.parser.content."""

from __future__ import annotations

import pytest

from spectools.exceptions import SpecParsingError, UnsupportedContentTypeError
from spectools.parser.content import is_supported_media_type, select_media_type


class TestIsSupportedMediaType:
    @pytest.mark.parametrize(
        "media_type",
        [
            "application/json",
            "application/problem+json",
            "application/vnd.api+json",
            "Application/JSON",
            "application/json; charset=utf-8",
            "text/plain",
            "*/*",
        ],
    )
    def test_supported(self, media_type: str) -> None:
        assert is_supported_media_type(media_type)

    @pytest.mark.parametrize(
        "media_type",
        [
            "application/xml",
            "multipart/form-data",
            "application/x-www-form-urlencoded",
            "text/html",
            "image/*",
            "application/json-patch",
        ],
    )
    def test_unsupported(self, media_type: str) -> None:
        assert not is_supported_media_type(media_type)


class TestSelectMediaType:
    def test_first_supported_entry_in_declaration_order(self) -> None:
        content = {
            "application/xml": {"schema": {"type": "string"}},
            "text/plain": {"schema": {"type": "string"}},
            "application/json": {"schema": {"type": "object"}},
        }
        media_type, media = select_media_type(content)
        assert media_type == "text/plain"
        assert media == {"schema": {"type": "string"}}

    def test_no_supported_entry_lists_available_types(self) -> None:
        with pytest.raises(UnsupportedContentTypeError) as exc_info:
            select_media_type({"application/xml": {}, "multipart/form-data": {}})
        assert exc_info.value.available_types == ["application/xml", "multipart/form-data"]
        assert "application/xml, multipart/form-data" in str(exc_info.value)

    def test_empty_content_raises(self) -> None:
        with pytest.raises(UnsupportedContentTypeError, match="available: none"):
            select_media_type({})

    def test_non_mapping_content_raises(self) -> None:
        with pytest.raises(SpecParsingError, match="content"):
            select_media_type(["application/json"])

    def test_non_mapping_media_object_raises(self) -> None:
        with pytest.raises(SpecParsingError, match="application/json"):
            select_media_type({"application/json": "oops"})
