"""Unit tests for ResetTokenManager."""

from datetime import timedelta

import pytest

from collegeadmin.auth import ResetTokenManager, hash_reset_token
from collegeadmin.credential_store import AccountRef, CredentialStore, utcnow
from collegeadmin.errors import AuthenticationError


class FakeClock:
    """Controllable clock returning naive UTC datetimes."""

    def __init__(self) -> None:
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(store: CredentialStore, clock: FakeClock) -> ResetTokenManager:
    return ResetTokenManager(store, clock=clock)


@pytest.fixture
def admin_ref(store: CredentialStore) -> AccountRef:
    return store.create_admin(name="Ada", email="ada@college.edu", password="Secret123").ref


@pytest.fixture
def student_ref(store: CredentialStore) -> AccountRef:
    return store.create_student(
        name="Grace",
        email="grace@college.edu",
        password="secret1",
        phone_number="+1 555 0100",
        qualifications=["BSc"],
        gender="female",
    ).ref


@pytest.mark.unit
class TestRequestReset:
    """Tests for request_reset."""

    def test_token_is_random_hex(self, manager: ResetTokenManager, admin_ref: AccountRef) -> None:
        """Tokens are 32 random bytes, hex encoded."""
        token = manager.request_reset(admin_ref)

        assert len(token) == 64
        int(token, 16)
        assert manager.request_reset(admin_ref) != token

    def test_only_digest_is_stored(
        self, manager: ResetTokenManager, store: CredentialStore, admin_ref: AccountRef
    ) -> None:
        """The account holds the sha256 digest, never the plaintext."""
        token = manager.request_reset(admin_ref)

        admin = store.get_account(admin_ref)
        assert admin.reset_token_hash == hash_reset_token(token)
        assert admin.reset_token_hash != token

    def test_expiry_is_one_hour(
        self,
        manager: ResetTokenManager,
        store: CredentialStore,
        admin_ref: AccountRef,
        clock: FakeClock,
    ) -> None:
        """The default lifetime is one hour from issuance."""
        manager.request_reset(admin_ref)

        admin = store.get_account(admin_ref)
        assert admin.reset_token_expires_at == clock.now + timedelta(hours=1)


@pytest.mark.unit
class TestConsumeReset:
    """Tests for consume_reset."""

    def test_consume_once(
        self, manager: ResetTokenManager, store: CredentialStore, admin_ref: AccountRef
    ) -> None:
        """A token works once; the second attempt fails."""
        token = manager.request_reset(admin_ref)

        assert manager.consume_reset(token, "Fresh789") == admin_ref
        assert store.hasher.verify("Fresh789", store.get_account(admin_ref).password_hash)

        with pytest.raises(AuthenticationError, match="Invalid or expired reset token"):
            manager.consume_reset(token, "Again789")

    def test_expired_token_matches_wrong_token(
        self, manager: ResetTokenManager, admin_ref: AccountRef, clock: FakeClock
    ) -> None:
        """Expired and unknown tokens fail with the same message."""
        token = manager.request_reset(admin_ref)
        clock.advance(timedelta(hours=1, seconds=1))

        with pytest.raises(AuthenticationError) as expired:
            manager.consume_reset(token, "Fresh789")
        with pytest.raises(AuthenticationError) as unknown:
            manager.consume_reset("f" * 64, "Fresh789")

        assert expired.value.message == unknown.value.message

    def test_still_valid_just_before_expiry(
        self, manager: ResetTokenManager, admin_ref: AccountRef, clock: FakeClock
    ) -> None:
        """A token is honoured until its expiry."""
        token = manager.request_reset(admin_ref)
        clock.advance(timedelta(minutes=59))

        assert manager.consume_reset(token, "Fresh789") == admin_ref

    def test_student_token(self, manager: ResetTokenManager, student_ref: AccountRef) -> None:
        """Student accounts are found after admins."""
        token = manager.request_reset(student_ref)

        assert manager.consume_reset(token, "fresh1") == student_ref

    def test_reissue_invalidates_previous(
        self, manager: ResetTokenManager, admin_ref: AccountRef
    ) -> None:
        """Requesting again replaces the pending token."""
        first = manager.request_reset(admin_ref)
        second = manager.request_reset(admin_ref)

        with pytest.raises(AuthenticationError):
            manager.consume_reset(first, "Fresh789")
        assert manager.consume_reset(second, "Fresh789") == admin_ref
