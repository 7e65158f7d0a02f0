"""Unit tests for CredentialStore admin operations."""

from datetime import datetime

import pytest

from collegeadmin.credential_store import (
    AccountExistsError,
    AccountNotFoundError,
    AccountRef,
    Admin,
    CredentialStore,
    Role,
)


@pytest.mark.unit
class TestCreateAdmin:
    """Tests for create_admin."""

    def test_create_admin(self, store: CredentialStore) -> None:
        """Admin is created with a generated id and hashed password."""
        admin = store.create_admin(name="Ada Admin", email="ada@college.edu", password="Secret123")

        assert admin.id is not None
        assert admin.name == "Ada Admin"
        assert admin.email == "ada@college.edu"
        assert admin.password_hash != "Secret123"
        assert admin.created_at is not None
        assert admin.updated_at is not None

    def test_password_is_never_stored_in_plaintext(self, store: CredentialStore) -> None:
        """The stored digest verifies but differs from the plaintext."""
        admin = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        assert admin.password_hash.encode() != b"Secret123"
        assert store.hasher.verify("Secret123", admin.password_hash)

    def test_email_is_normalized(self, store: CredentialStore) -> None:
        """Emails are stored lower-cased and trimmed."""
        admin = store.create_admin(name="Ada", email="  Ada@College.EDU ", password="Secret123")

        assert admin.email == "ada@college.edu"

    def test_duplicate_email_raises(self, store: CredentialStore) -> None:
        """AccountExistsError on duplicate email."""
        store.create_admin(name="First", email="ada@college.edu", password="Secret123")

        with pytest.raises(AccountExistsError):
            store.create_admin(name="Second", email="ada@college.edu", password="Secret123")

    def test_duplicate_email_is_case_insensitive(self, store: CredentialStore) -> None:
        """Case variants of an existing email are rejected."""
        store.create_admin(name="First", email="ada@college.edu", password="Secret123")

        with pytest.raises(AccountExistsError):
            store.create_admin(name="Second", email="ADA@College.edu", password="Secret123")

    def test_same_email_allowed_for_student(self, store: CredentialStore) -> None:
        """Admin and student tables enforce uniqueness independently."""
        store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        student = store.create_student(
            name="Ada Student",
            email="ada@college.edu",
            password="secret1",
            phone_number="+1 555 0100",
            qualifications=["BSc"],
            gender="female",
        )

        assert student.email == "ada@college.edu"


@pytest.mark.unit
class TestGetAdmin:
    """Tests for get_admin and lookups."""

    def test_get_admin(self, store: CredentialStore) -> None:
        """Get an existing admin by id."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        admin = store.get_admin(created.id)

        assert admin.id == created.id
        assert admin.email == "ada@college.edu"

    def test_get_admin_not_found(self, store: CredentialStore) -> None:
        """AccountNotFoundError for unknown id."""
        with pytest.raises(AccountNotFoundError) as exc_info:
            store.get_admin("missing")

        assert exc_info.value.message == "Admin not found"
        assert exc_info.value.status_code == 404

    def test_get_account_by_ref(self, store: CredentialStore) -> None:
        """get_account dispatches on the reference's role."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        account = store.get_account(AccountRef.admin(created.id))

        assert isinstance(account, Admin)
        assert account.ref == AccountRef(Role.ADMIN, created.id)

    def test_find_by_email(self, store: CredentialStore) -> None:
        """find_by_email normalizes the address and returns None when absent."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        found = store.find_by_email(Role.ADMIN, "ADA@college.edu")

        assert found is not None
        assert found.id == created.id
        assert store.find_by_email(Role.STUDENT, "ada@college.edu") is None
        assert store.find_by_email(Role.ADMIN, "nobody@college.edu") is None


@pytest.mark.unit
class TestUpdateAdmin:
    """Tests for update_admin."""

    def test_update_name(self, store: CredentialStore) -> None:
        """Only the provided field changes."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        admin = store.update_admin(created.id, name="Ada Lovelace")

        assert admin.name == "Ada Lovelace"
        assert admin.email == "ada@college.edu"

    def test_update_email(self, store: CredentialStore) -> None:
        """Email can change to an unused address."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        admin = store.update_admin(created.id, email="Lovelace@College.edu")

        assert admin.email == "lovelace@college.edu"

    def test_update_email_to_own_address(self, store: CredentialStore) -> None:
        """Re-submitting the current email is not a conflict."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        admin = store.update_admin(created.id, email="ada@college.edu")

        assert admin.email == "ada@college.edu"

    def test_update_email_taken_raises(self, store: CredentialStore) -> None:
        """AccountExistsError when another admin holds the email."""
        store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")
        other = store.create_admin(name="Bob", email="bob@college.edu", password="Secret123")

        with pytest.raises(AccountExistsError) as exc_info:
            store.update_admin(other.id, email="ada@college.edu")

        assert exc_info.value.message == "Email already in use"

    def test_update_email_race_maps_to_conflict(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The UNIQUE index rejects an email claimed after the lookup."""
        store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")
        other = store.create_admin(name="Bob", email="bob@college.edu", password="Secret123")
        monkeypatch.setattr(store, "_email_taken", lambda *args, **kwargs: False)

        with pytest.raises(AccountExistsError):
            store.update_admin(other.id, email="ada@college.edu")

        assert store.get_admin(other.id).email == "bob@college.edu"

    def test_update_not_found(self, store: CredentialStore) -> None:
        """AccountNotFoundError for unknown id."""
        with pytest.raises(AccountNotFoundError):
            store.update_admin("missing", name="Nobody")

    def test_change_password(self, store: CredentialStore) -> None:
        """change_password re-hashes the new password."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")

        store.change_password(created.ref, "Better456")

        admin = store.get_admin(created.id)
        assert store.hasher.verify("Better456", admin.password_hash)
        assert not store.hasher.verify("Secret123", admin.password_hash)


@pytest.mark.unit
class TestRecordAdminLogin:
    """Tests for record_admin_login."""

    def test_records_given_time(self, store: CredentialStore) -> None:
        """The last login timestamp is stored."""
        created = store.create_admin(name="Ada", email="ada@college.edu", password="Secret123")
        at = datetime(2026, 3, 14, 9, 26, 53)

        admin = store.record_admin_login(created.id, at=at)

        assert admin.last_login_at == at
        assert store.get_admin(created.id).last_login_at == at

    def test_not_found(self, store: CredentialStore) -> None:
        """AccountNotFoundError for unknown id."""
        with pytest.raises(AccountNotFoundError):
            store.record_admin_login("missing")
