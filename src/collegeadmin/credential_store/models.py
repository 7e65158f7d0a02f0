"""SQLAlchemy models for the Credential Store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any, ClassVar

from sqlalchemy import JSON, DateTime, LargeBinary, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Role(StrEnum):
    """Account role, also used as the tag of AccountRef."""

    ADMIN = "admin"
    STUDENT = "student"


class Gender(StrEnum):
    """Student gender enum."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address for storage and lookup."""
    return email.strip().lower()


@dataclass(frozen=True)
class AccountRef:
    """Reference to one account: which table it lives in and its id."""

    role: Role
    id: str

    @classmethod
    def admin(cls, account_id: str) -> AccountRef:
        return cls(Role.ADMIN, account_id)

    @classmethod
    def student(cls, account_id: str) -> AccountRef:
        return cls(Role.STUDENT, account_id)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AccountMixin:
    """Columns shared by every account variant."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    reset_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    role: ClassVar[Role]

    @property
    def ref(self) -> AccountRef:
        """Tagged reference to this account."""
        return AccountRef(self.role, self.id)

    @property
    def has_pending_reset(self) -> bool:
        return self.reset_token_hash is not None


class Admin(AccountMixin, Base):
    """Admin account."""

    __tablename__ = "admins"

    role = Role.ADMIN

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, server_default=func.now()
    )
    profile_picture: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True, deferred=True
    )
    profile_picture_content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __init__(
        self,
        name: str,
        email: str,
        password_hash: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.email = normalize_email(email)
        self.password_hash = password_hash

    def __repr__(self) -> str:
        return f"<Admin(id={self.id!r}, email={self.email!r})>"


class Student(AccountMixin, Base):
    """Student account."""

    __tablename__ = "students"

    role = Role.STUDENT

    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    qualifications: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    profile_image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True, deferred=True)
    profile_image_content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __init__(
        self,
        name: str,
        email: str,
        password_hash: str,
        phone_number: str,
        qualifications: list[str],
        gender: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.email = normalize_email(email)
        self.password_hash = password_hash
        self.phone_number = phone_number
        self.qualifications = list(qualifications)
        self.gender = gender

    @property
    def student_gender(self) -> Gender:
        """Get gender as Gender enum."""
        return Gender(self.gender)

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, email={self.email!r})>"


Account = Admin | Student


@dataclass
class ProfileImage:
    """Binary profile picture loaded on explicit request."""

    data: bytes
    content_type: str


@dataclass
class StudentPage:
    """One page of the student roster."""

    students: list[Student]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass
class StudentStats:
    """Aggregated roster statistics for the admin dashboard."""

    total_students: int
    new_students_this_month: int
    active_students: int
