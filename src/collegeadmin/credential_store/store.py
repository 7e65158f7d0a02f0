"""CredentialStore - Main API for account persistence."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import undefer

from collegeadmin.credential_store.database import Database
from collegeadmin.credential_store.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    ImageNotFoundError,
)
from collegeadmin.credential_store.models import (
    Account,
    AccountRef,
    Admin,
    ProfileImage,
    Role,
    Student,
    StudentPage,
    StudentStats,
    normalize_email,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from collegeadmin.auth.passwords import PasswordHasher

logger = logging.getLogger("collegeadmin.credential_store")

_MODELS: dict[Role, type[Admin] | type[Student]] = {
    Role.ADMIN: Admin,
    Role.STUDENT: Student,
}

STUDENT_SORT_FIELDS = ("name", "email", "phone_number", "gender", "created_at")

ACTIVE_WINDOW = timedelta(days=30)


def utcnow() -> datetime:
    """Current time as naive UTC, matching what SQLite stores."""
    return datetime.now(UTC).replace(tzinfo=None)


class CredentialStore:
    """Main API for Credential Store operations.

    Provides CRUD operations for Admin and Student accounts and the
    reset-token bookkeeping shared by both. Passwords are hashed here on
    create and whenever an update carries a new plaintext password.
    """

    def __init__(
        self, db_path: str = "collegeadmin.db", hasher: PasswordHasher | None = None
    ) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            hasher: Password hasher; a default bcrypt hasher is used if omitted
        """
        if hasher is None:
            from collegeadmin.auth.passwords import PasswordHasher  # noqa: PLC0415

            hasher = PasswordHasher()
        self._hasher = hasher
        self._db = Database(db_path)
        self._db.create_tables()

    @property
    def hasher(self) -> PasswordHasher:
        return self._hasher

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Shared helpers ---

    def _load(self, session: Session, role: Role, account_id: str) -> Account:
        model = _MODELS[role]
        account = session.get(model, account_id)
        if account is None:
            raise AccountNotFoundError(f"{role.value.capitalize()} not found")
        return account

    def _email_taken(
        self, session: Session, role: Role, email: str, exclude_id: str | None = None
    ) -> bool:
        model = _MODELS[role]
        stmt = select(model.id).where(model.email == email)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        return session.execute(stmt).first() is not None

    def _commit(self, session: Session, email: str) -> None:
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            message = str(e.orig)
            if "UNIQUE constraint failed" in message and "email" in message:
                raise AccountExistsError(f"Account with email '{email}' already exists") from e
            raise

    def get_account(self, ref: AccountRef) -> Account:
        """Get an account of either kind.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._load(session, ref.role, ref.id)
        finally:
            session.close()

    def find_by_email(self, role: Role, email: str) -> Account | None:
        """Look up an account by (normalized) email; None if absent."""
        model = _MODELS[role]
        session = self._db.get_session()
        try:
            stmt = select(model).where(model.email == normalize_email(email))
            return session.execute(stmt).scalar_one_or_none()
        finally:
            session.close()

    def change_password(self, ref: AccountRef, password: str) -> None:
        """Replace an account's password (re-hashed).

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        session = self._db.get_session()
        try:
            account = self._load(session, ref.role, ref.id)
            account.password_hash = self._hasher.hash(password)
            session.commit()
        finally:
            session.close()

    # --- Reset token operations ---

    def set_reset_token(self, ref: AccountRef, token_hash: str, expires_at: datetime) -> None:
        """Store a reset token digest and its expiry, replacing any pending one.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        session = self._db.get_session()
        try:
            account = self._load(session, ref.role, ref.id)
            account.reset_token_hash = token_hash
            account.reset_token_expires_at = expires_at
            session.commit()
        finally:
            session.close()

    def consume_reset_token(
        self, role: Role, token_hash: str, password: str, now: datetime
    ) -> AccountRef | None:
        """Set a new password if a live reset token with this digest exists.

        The write is a single UPDATE conditioned on the digest and expiry, so
        of two concurrent callers with the same token only one succeeds.

        Args:
            role: Which account table to search
            token_hash: sha256 hex digest of the presented token
            password: New plaintext password
            now: Current time (naive UTC)

        Returns:
            Reference to the updated account, or None when nothing matched
        """
        model = _MODELS[role]
        live = (model.reset_token_hash == token_hash, model.reset_token_expires_at > now)

        session = self._db.get_session()
        try:
            account_id = session.execute(select(model.id).where(*live)).scalar_one_or_none()
        finally:
            session.close()
        if account_id is None:
            return None

        password_hash = self._hasher.hash(password)
        session = self._db.get_session()
        try:
            result = session.execute(
                update(model)
                .where(model.id == account_id, *live)
                .values(
                    password_hash=password_hash,
                    reset_token_hash=None,
                    reset_token_expires_at=None,
                )
                .execution_options(synchronize_session=False)
            )
            session.commit()
        finally:
            session.close()

        if result.rowcount != 1:
            return None
        return AccountRef(role, account_id)

    # --- Admin operations ---

    def create_admin(self, name: str, email: str, password: str) -> Admin:
        """Create a new admin.

        Returns:
            Created Admin with generated ID

        Raises:
            AccountExistsError: If an admin with the same email already exists
        """
        email = normalize_email(email)
        session = self._db.get_session()
        try:
            if self._email_taken(session, Role.ADMIN, email):
                raise AccountExistsError(f"Account with email '{email}' already exists")
            admin = Admin(name=name.strip(), email=email, password_hash=self._hasher.hash(password))
            session.add(admin)
            self._commit(session, email)
            session.refresh(admin)
            logger.info("Created admin %s", admin.id)
            return admin
        finally:
            session.close()

    def get_admin(self, admin_id: str) -> Admin:
        """Get admin by ID.

        Raises:
            AccountNotFoundError: If admin doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._load(session, Role.ADMIN, admin_id)  # type: ignore[return-value]
        finally:
            session.close()

    def update_admin(
        self,
        admin_id: str,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> Admin:
        """Update admin fields. Only provided fields are updated.

        Raises:
            AccountNotFoundError: If admin doesn't exist
            AccountExistsError: If the new email belongs to another admin
        """
        session = self._db.get_session()
        try:
            admin = self._load(session, Role.ADMIN, admin_id)
            if name is not None:
                admin.name = name.strip()
            if email is not None:
                email = normalize_email(email)
                if email != admin.email:
                    if self._email_taken(session, Role.ADMIN, email, exclude_id=admin_id):
                        raise AccountExistsError("Email already in use")
                    admin.email = email
            if password is not None:
                admin.password_hash = self._hasher.hash(password)

            self._commit(session, admin.email)
            session.refresh(admin)
            return admin  # type: ignore[return-value]
        finally:
            session.close()

    def record_admin_login(self, admin_id: str, at: datetime | None = None) -> Admin:
        """Stamp the admin's last successful login.

        Raises:
            AccountNotFoundError: If admin doesn't exist
        """
        session = self._db.get_session()
        try:
            admin = self._load(session, Role.ADMIN, admin_id)
            admin.last_login_at = at if at is not None else utcnow()
            session.commit()
            session.refresh(admin)
            return admin  # type: ignore[return-value]
        finally:
            session.close()

    # --- Profile image operations ---

    def set_profile_image(self, ref: AccountRef, data: bytes, content_type: str) -> None:
        """Store the binary profile picture of an admin or student.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        session = self._db.get_session()
        try:
            account = self._load(session, ref.role, ref.id)
            if isinstance(account, Admin):
                account.profile_picture = data
                account.profile_picture_content_type = content_type
            else:
                account.profile_image = data
                account.profile_image_content_type = content_type
            session.commit()
        finally:
            session.close()

    def get_profile_image(self, ref: AccountRef) -> ProfileImage:
        """Load the binary profile picture, which is excluded from normal reads.

        Raises:
            AccountNotFoundError: If the account doesn't exist
            ImageNotFoundError: If no picture has been uploaded
        """
        if ref.role is Role.ADMIN:
            data_col, type_col = Admin.profile_picture, Admin.profile_picture_content_type
        else:
            data_col, type_col = Student.profile_image, Student.profile_image_content_type
        model = _MODELS[ref.role]

        session = self._db.get_session()
        try:
            stmt = select(model).options(undefer(data_col)).where(model.id == ref.id)
            account = session.execute(stmt).scalar_one_or_none()
            if account is None:
                raise AccountNotFoundError(f"{ref.role.value.capitalize()} not found")
            data = getattr(account, data_col.key)
            if not data:
                raise ImageNotFoundError("Profile picture not found")
            content_type = getattr(account, type_col.key) or "image/jpeg"
            return ProfileImage(data=data, content_type=content_type)
        finally:
            session.close()

    # --- Student operations ---

    def create_student(
        self,
        name: str,
        email: str,
        password: str,
        phone_number: str,
        qualifications: list[str],
        gender: str,
    ) -> Student:
        """Create a new student.

        Returns:
            Created Student with generated ID

        Raises:
            AccountExistsError: If a student with the same email already exists
        """
        email = normalize_email(email)
        session = self._db.get_session()
        try:
            if self._email_taken(session, Role.STUDENT, email):
                raise AccountExistsError(f"Account with email '{email}' already exists")
            student = Student(
                name=name.strip(),
                email=email,
                password_hash=self._hasher.hash(password),
                phone_number=phone_number,
                qualifications=qualifications,
                gender=str(gender),
            )
            session.add(student)
            self._commit(session, email)
            session.refresh(student)
            logger.info("Created student %s", student.id)
            return student
        finally:
            session.close()

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            AccountNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            return self._load(session, Role.STUDENT, student_id)  # type: ignore[return-value]
        finally:
            session.close()

    def list_students(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        sort: str = "created_at",
        order: str = "desc",
    ) -> StudentPage:
        """List students with pagination, search and sorting.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring matched against name and email
            sort: One of STUDENT_SORT_FIELDS
            order: "asc" or "desc"

        Returns:
            The requested page and the total number of matches
        """
        page = max(page, 1)
        limit = max(limit, 1)
        sort_column = getattr(Student, sort if sort in STUDENT_SORT_FIELDS else "created_at")
        ordering = sort_column.asc() if order == "asc" else sort_column.desc()

        session = self._db.get_session()
        try:
            stmt = select(Student)
            count_stmt = select(func.count(Student.id))
            if search:
                term = search.strip().lower()
                condition = or_(
                    func.lower(Student.name).contains(term, autoescape=True),
                    Student.email.contains(term, autoescape=True),
                )
                stmt = stmt.where(condition)
                count_stmt = count_stmt.where(condition)

            stmt = stmt.order_by(ordering, Student.id).limit(limit).offset((page - 1) * limit)
            students = list(session.execute(stmt).scalars().all())
            total = session.execute(count_stmt).scalar_one()
            return StudentPage(students=students, total=total, page=page, limit=limit)
        finally:
            session.close()

    def update_student(
        self,
        student_id: str,
        name: str | None = None,
        email: str | None = None,
        phone_number: str | None = None,
        qualifications: list[str] | None = None,
        gender: str | None = None,
        password: str | None = None,
    ) -> Student:
        """Update student fields. Only provided fields are updated.

        Raises:
            AccountNotFoundError: If student doesn't exist
            AccountExistsError: If the new email belongs to another student
        """
        session = self._db.get_session()
        try:
            student = self._load(session, Role.STUDENT, student_id)
            if email is not None:
                email = normalize_email(email)
                if email != student.email:
                    if self._email_taken(session, Role.STUDENT, email, exclude_id=student_id):
                        raise AccountExistsError("Email already in use")
                    student.email = email
            if name is not None:
                student.name = name.strip()
            if phone_number is not None:
                student.phone_number = phone_number
            if qualifications is not None:
                student.qualifications = list(qualifications)
            if gender is not None:
                student.gender = str(gender)
            if password is not None:
                student.password_hash = self._hasher.hash(password)

            self._commit(session, student.email)
            session.refresh(student)
            return student  # type: ignore[return-value]
        finally:
            session.close()

    def delete_student(self, student_id: str) -> None:
        """Delete a student. Immediate and irreversible.

        Raises:
            AccountNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = self._load(session, Role.STUDENT, student_id)
            session.delete(student)
            session.commit()
            logger.info("Deleted student %s", student_id)
        finally:
            session.close()

    def get_student_stats(self, now: datetime | None = None) -> StudentStats:
        """Aggregate roster counts for the admin dashboard.

        Args:
            now: Reference time (naive UTC); defaults to the current time

        Returns:
            StudentStats with total, new-this-month and recently-active counts
        """
        now = now if now is not None else utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        session = self._db.get_session()
        try:
            total = session.execute(select(func.count(Student.id))).scalar_one()
            new_this_month = session.execute(
                select(func.count(Student.id)).where(Student.created_at >= month_start)
            ).scalar_one()
            active = session.execute(
                select(func.count(Student.id)).where(Student.updated_at >= now - ACTIVE_WINDOW)
            ).scalar_one()
            return StudentStats(
                total_students=total,
                new_students_this_month=new_this_month,
                active_students=active,
            )
        finally:
            session.close()
