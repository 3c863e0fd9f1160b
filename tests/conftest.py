"""Shared test fixtures for apicol.

Provides document fixtures, isolated config environments, output state
management, and a CLI runner. Discovered automatically by pytest.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from apicol.importer import import_collection
from apicol.models import Collection, ImportResult
from apicol.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    """Return the text of a document under ``tests/fixtures``."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager keeps references to sys.stdout/sys.stderr from the
    moment it is created. CliRunner swaps those streams per invocation, so
    a manager surviving a test would write to closed files.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_apicol_logger() -> None:
    """Drop handlers the CLI callback attached to the ``apicol`` logger."""
    yield
    logger = logging.getLogger("apicol")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def imgflip_text() -> str:
    """Tagless OpenAPI 3.0 YAML with URL-encoded form bodies."""
    return read_fixture("imgflip.yaml")


@pytest.fixture
def pix_text() -> str:
    """Tagged OpenAPI 3.0 YAML with two described servers."""
    return read_fixture("pix.yaml")


@pytest.fixture
def petstore_v3_text() -> str:
    """OpenAPI 3.0 JSON with components, request bodies and XML schemas."""
    return read_fixture("petstore_v3.json")


@pytest.fixture
def petstore_v2_text() -> str:
    """Swagger 2.0 YAML with body, formData and multipart operations."""
    return read_fixture("petstore_v2.yaml")


@pytest.fixture
def pix_result(pix_text: str) -> ImportResult:
    return import_collection(pix_text)


@pytest.fixture
def imgflip_collection(imgflip_text: str) -> Collection:
    return import_collection(imgflip_text).collection


@pytest.fixture
def petstore_v3_collection(petstore_v3_text: str) -> Collection:
    return import_collection(petstore_v3_text, hint="json").collection


@pytest.fixture
def petstore_v2_collection(petstore_v2_text: str) -> Collection:
    return import_collection(petstore_v2_text, hint="yaml").collection


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME into tmp_path, forces the XDG
    layout, clears APICOL_* variables and changes into tmp_path so no
    project config leaks in.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("apicol.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("APICOL_OPERATION_ORDER", "APICOL_BASE_URL_VARIABLE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
