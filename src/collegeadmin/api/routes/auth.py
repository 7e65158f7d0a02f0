"""Registration, login and password reset endpoints."""

from fastapi import APIRouter, status

from collegeadmin.api.dependencies import AuthServiceDep
from collegeadmin.api.models import (
    APIResponse,
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    StudentLoginRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_SENT = "Password reset instructions sent to email"
RESET_TEST_MODE = "Mail test mode: reset token returned instead of sent"
RESET_DONE = "Password reset successful"


@router.post(
    "/admin/register",
    response_model=APIResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_admin(request: RegisterRequest, auth: AuthServiceDep) -> APIResponse[AuthResponse]:
    """Register a new admin and return a bearer token."""
    result = auth.register(name=request.name, email=request.email, password=request.password)
    return APIResponse(data=AuthResponse.model_validate(result))


@router.post("/admin/login", response_model=APIResponse[AuthResponse])
def login_admin(request: LoginRequest, auth: AuthServiceDep) -> APIResponse[AuthResponse]:
    """Log an admin in."""
    result = auth.login(email=request.email, password=request.password)
    return APIResponse(data=AuthResponse.model_validate(result))


@router.post("/student/login", response_model=APIResponse[AuthResponse])
def login_student(request: StudentLoginRequest, auth: AuthServiceDep) -> APIResponse[AuthResponse]:
    """Log a student in."""
    result = auth.student_login(email=request.email, password=request.password)
    return APIResponse(data=AuthResponse.model_validate(result))


@router.post("/forgot-password", response_model=APIResponse[ForgotPasswordResponse])
async def forgot_password(
    request: ForgotPasswordRequest, auth: AuthServiceDep
) -> APIResponse[ForgotPasswordResponse]:
    """Start a password reset for an admin or student account."""
    result = await auth.forgot_password(request.email)
    if result.sent:
        return APIResponse(data=ForgotPasswordResponse(message=RESET_SENT))
    return APIResponse(
        data=ForgotPasswordResponse(
            message=RESET_TEST_MODE,
            reset_token=result.reset_token,
            reset_url=result.reset_url,
        )
    )


@router.put("/reset-password", response_model=APIResponse[MessageResponse])
def reset_password(
    request: ResetPasswordRequest, auth: AuthServiceDep
) -> APIResponse[MessageResponse]:
    """Redeem a reset token and set a new password."""
    auth.reset_password(request.token, request.password)
    return APIResponse(data=MessageResponse(message=RESET_DONE))
