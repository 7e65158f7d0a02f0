"""Pydantic models for REST API."""

import re
from datetime import datetime
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator

from collegeadmin.credential_store import Gender, Role

T = TypeVar("T")

PHONE_PATTERN = r"^\+?[\d\s-]{8,}$"

_PASSWORD_STRENGTH = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_STRENGTH_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, and one number"
)


def check_password_strength(value: str) -> str:
    """Require upper case, lower case and a digit."""
    if not _PASSWORD_STRENGTH.match(value):
        raise ValueError(PASSWORD_STRENGTH_MESSAGE)
    return value


def strip_name(value: Any) -> Any:
    """Trim surrounding whitespace so length limits apply to the stored name."""
    return value.strip() if isinstance(value, str) else value


Name = Annotated[str, Field(min_length=2, max_length=50), BeforeValidator(strip_name)]


class FieldError(BaseModel):
    """One failed validation rule."""

    field: str
    message: str


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    status: Literal["success", "error"] = "success"
    data: T | None = None
    message: str | None = None
    errors: list[FieldError] | None = None


def error_response(message: str, errors: list[dict[str, str]] | None = None) -> dict[str, Any]:
    """Serialized error envelope."""
    return APIResponse[None](
        status="error",
        message=message,
        errors=[FieldError(**e) for e in errors] if errors else None,
    ).model_dump()


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


# Auth models


class RegisterRequest(BaseModel):
    """Request model for admin registration."""

    name: Name
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class LoginRequest(BaseModel):
    """Request model for admin login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class StudentLoginRequest(BaseModel):
    """Request model for student login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    """Request model for starting a password reset."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request model for redeeming a reset token."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class ChangePasswordRequest(BaseModel):
    """Request model for changing one's own password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=50)

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        return check_password_strength(value)


class AuthResponse(BaseModel):
    """Response model for register/login."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role
    token: str


class ForgotPasswordResponse(BaseModel):
    """Response model for forgot-password.

    ``reset_token`` and ``reset_url`` are only present in mail test mode.
    """

    message: str
    reset_token: str | None = None
    reset_url: str | None = None


# Admin models


class AdminProfileUpdate(BaseModel):
    """Request model for updating the admin profile (partial update)."""

    name: Name | None = None
    email: EmailStr | None = None


class AdminResponse(BaseModel):
    """Response model for an admin profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


def admin_to_response(admin: Any) -> AdminResponse:
    """Convert an Admin model to AdminResponse."""
    return AdminResponse.model_validate(admin)


class DashboardStatsResponse(BaseModel):
    """Response model for the admin dashboard."""

    model_config = ConfigDict(from_attributes=True)

    total_students: int
    new_students_this_month: int
    active_students: int


def stats_to_response(stats: Any) -> DashboardStatsResponse:
    """Convert StudentStats to DashboardStatsResponse."""
    return DashboardStatsResponse.model_validate(stats)


class ImageUploadResponse(BaseModel):
    """Response model for a profile picture upload."""

    message: str
    content_type: str
    size: int


# Student models


class StudentCreate(BaseModel):
    """Request model for creating a student."""

    name: Name
    email: EmailStr
    phone_number: str = Field(..., pattern=PHONE_PATTERN, max_length=30)
    qualifications: list[str] = Field(..., min_length=1)
    gender: Gender
    password: str = Field(..., min_length=6, max_length=100)


class StudentUpdate(BaseModel):
    """Request model for updating a student (partial update)."""

    name: Name | None = None
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN, max_length=30)
    qualifications: list[str] | None = Field(default=None, min_length=1)
    gender: Gender | None = None
    password: str | None = Field(default=None, min_length=6, max_length=100)


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone_number: str
    qualifications: list[str]
    gender: Gender
    created_at: datetime
    updated_at: datetime


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


class StudentListResponse(BaseModel):
    """Response model for one page of students."""

    students: list[StudentResponse]
    page: int
    limit: int
    total: int
    total_pages: int


def student_page_to_response(page: Any) -> StudentListResponse:
    """Convert a StudentPage to StudentListResponse."""
    return StudentListResponse(
        students=[student_to_response(s) for s in page.students],
        page=page.page,
        limit=page.limit,
        total=page.total,
        total_pages=page.total_pages,
    )
