# tests/conftest.py
import pytest

from marketsync.core.config import Settings
from marketsync.services.account_directory import AccountDirectory
from marketsync.services.auth_manager import AuthenticationManager
from marketsync.services.credential_store import CredentialStore
from marketsync.services.object_store import InMemoryObjectStore
from marketsync.services.telemetry import TelemetryService

from tests.helpers import make_product


@pytest.fixture
def settings():
    """Provide test settings, ignoring any local .env file"""
    return Settings(
        _env_file=None,
        EBAY_CLIENT_ID="ebay-client",
        EBAY_CLIENT_SECRET="ebay-secret",
        MERCARI_CLIENT_ID="mercari-client",
        MERCARI_CLIENT_SECRET="mercari-secret",
        FACEBOOK_CLIENT_ID="facebook-client",
        FACEBOOK_CLIENT_SECRET="facebook-secret",
        EBAY_REFRESH_TOKEN="",
        MERCARI_REFRESH_TOKEN="",
        FACEBOOK_REFRESH_TOKEN="",
    )


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def credentials():
    return CredentialStore()


@pytest.fixture
def telemetry():
    return TelemetryService()


@pytest.fixture
def accounts(settings):
    return AccountDirectory(settings)


@pytest.fixture
def auth(accounts, credentials, telemetry, settings):
    return AuthenticationManager(
        accounts,
        credentials,
        telemetry=telemetry,
        token_validity_seconds=settings.TOKEN_VALIDITY_SECONDS
    )


@pytest.fixture
def product():
    return make_product()
