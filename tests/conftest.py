"""Shared pytest fixtures for all tests."""

import io
import zipfile
from unittest.mock import MagicMock

import pytest

from wizdomsubs.app import create_app
from wizdomsubs.config import Settings
from wizdomsubs.mediaserver.base import LibraryIndex
from wizdomsubs.providers.base import SubtitleProvider
from wizdomsubs.providers.wizdom import WizdomProvider
from wizdomsubs.resolver import IdentifierResolver
from wizdomsubs.subtitle_manager import SubtitleManager


def make_zip(entries):
    """Build ZIP bytes from a list of (name, content) pairs, in order."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in entries:
            zf.writestr(name, content)
    return buf.getvalue()


def make_response(status_code=200, body=b""):
    """Streaming requests.Response stand-in."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.iter_content.side_effect = lambda chunk_size=None: iter([body] if body else [])
    return resp


@pytest.fixture
def settings():
    """Defaults only; ignores any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def mock_session():
    return MagicMock()


@pytest.fixture
def wizdom(mock_session):
    """WizdomProvider talking to a mocked session."""
    return WizdomProvider(api_base="https://wizdom.test/api", session=mock_session)


@pytest.fixture
def library():
    lib = MagicMock(spec=LibraryIndex)
    lib.find_series_by_path.return_value = None
    lib.find_series_by_name.return_value = None
    lib.get_item.return_value = None
    lib.health_check.return_value = (True, "OK")
    return lib


@pytest.fixture
def provider():
    """Mocked catalog; tests set search/fetch behaviour."""
    prov = MagicMock(spec=SubtitleProvider)
    prov.search.return_value = []
    prov.health_check.return_value = (True, "OK")
    return prov


@pytest.fixture
def manager(settings, provider, library):
    return SubtitleManager(settings, provider, IdentifierResolver(library, settings.get_series_mappings()))


@pytest.fixture
def app(settings, library, provider):
    return create_app(settings=settings, library=library, provider=provider, testing=True)


@pytest.fixture
def client(app):
    """Create a test client for Flask app."""
    with app.test_client() as client:
        yield client
