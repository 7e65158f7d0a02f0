"""Shared pytest fixtures and configuration."""

import pytest

from collegeadmin.auth import PasswordHasher
from collegeadmin.config import MailSettings, Settings
from collegeadmin.credential_store import CredentialStore

TEST_SECRET = "test-secret-key-for-signing-tokens"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def hasher() -> PasswordHasher:
    """Password hasher with the cheapest bcrypt cost."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: in-memory database, mail test mode, fast hashing."""
    return Settings(
        jwt_secret=TEST_SECRET,
        environment="test",
        database_path=":memory:",
        bcrypt_rounds=4,
        frontend_url="http://frontend.test",
        mail=MailSettings(test_mode=True),
    )


@pytest.fixture
def store(hasher: PasswordHasher):
    """Create an in-memory CredentialStore."""
    s = CredentialStore(":memory:", hasher=hasher)
    yield s
    s.close()
