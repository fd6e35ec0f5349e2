"""Shared test fixtures for spectools.

Provides reusable fixtures for loading document fixtures, building small
documents inline, isolating configuration, and running CLI commands.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from spectools.models import ApiSpecification
from spectools.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Global state reset between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the global OutputManager and the ``spectools`` logger.

    The CLI callback installs a Rich handler and stops propagation on the
    package logger; undoing that keeps ``caplog`` working in later tests.
    """
    yield
    reset_output()
    logger = logging.getLogger("spectools")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore.json"


@pytest.fixture
def petstore_raw(petstore_path: Path) -> dict[str, Any]:
    """Load the raw petstore document dict."""
    with open(petstore_path) as f:
        return json.load(f)


@pytest.fixture
def petstore_api(petstore_raw: dict[str, Any]) -> ApiSpecification:
    """Visited petstore document with default extraction flags."""
    from spectools.parser import visit_spec

    return visit_spec(petstore_raw)


@pytest.fixture
def make_spec() -> Callable[..., dict[str, Any]]:
    """Factory for minimal OpenAPI 3.0 documents.

    Example::

        raw = make_spec(paths={"/a": {"get": {...}}}, components={"schemas": {...}})
    """

    def _make(
        paths: Optional[dict[str, Any]] = None,
        components: Optional[dict[str, Any]] = None,
        servers: Optional[list[dict[str, Any]]] = None,
        version: Any = "3.0.3",
    ) -> dict[str, Any]:
        spec: dict[str, Any] = {
            "openapi": version,
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": paths or {},
        }
        if components is not None:
            spec["components"] = components
        if servers is not None:
            spec["servers"] = servers
        return spec

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at ``tmp_path / "config"``, forces the XDG code
    path, clears all SPECTOOLS_* environment variables and changes the
    working directory to ``tmp_path``.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("spectools.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["SPECTOOLS_EXTRACT_DESCRIPTION", "SPECTOOLS_EXTRACT_DEFAULT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
