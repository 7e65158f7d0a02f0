"""Integration tests for the SQLite database layer."""

import tempfile
from pathlib import Path

import pytest

from collegeadmin.auth import PasswordHasher
from collegeadmin.credential_store import CredentialStore
from collegeadmin.credential_store.database import Database


@pytest.fixture
def temp_db_path():
    """Temporary database file, removed afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield str(Path(tmpdir) / "collegeadmin.db")


@pytest.mark.integration
class TestDatabase:
    """Tests for file-backed databases."""

    def test_wal_mode_enabled(self, temp_db_path: str) -> None:
        """File databases run in WAL mode."""
        db = Database(temp_db_path)
        db.create_tables()

        assert db.is_wal_mode()
        db.close()

    def test_data_survives_reopen(self, temp_db_path: str) -> None:
        """Accounts persist across store instances."""
        hasher = PasswordHasher(rounds=4)
        first = CredentialStore(temp_db_path, hasher=hasher)
        admin = first.create_admin(name="Ada", email="ada@college.edu", password="Secret123")
        first.close()

        second = CredentialStore(temp_db_path, hasher=hasher)
        try:
            assert second.get_admin(admin.id).email == "ada@college.edu"
        finally:
            second.close()
