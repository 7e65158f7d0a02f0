"""Student roster and student self-service endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, File, Query, Response, UploadFile, status

from collegeadmin.api.dependencies import (
    AdminIdentity,
    AuthServiceDep,
    CurrentIdentity,
    SettingsDep,
    StoreDep,
    StudentIdentity,
    ensure_self_or_admin,
)
from collegeadmin.api.models import (
    APIResponse,
    ChangePasswordRequest,
    ImageUploadResponse,
    MessageResponse,
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
    student_page_to_response,
    student_to_response,
)
from collegeadmin.api.uploads import image_response, read_image_upload
from collegeadmin.credential_store import AccountRef, CredentialStore

router = APIRouter(prefix="/students", tags=["students"])

IMAGE_FIELD = "profileImage"

SortField = Literal["name", "email", "phone_number", "gender", "created_at"]


def _update(store: CredentialStore, student_id: str, request: StudentUpdate) -> StudentResponse:
    student = store.update_student(
        student_id,
        name=request.name,
        email=request.email,
        phone_number=request.phone_number,
        qualifications=request.qualifications,
        gender=request.gender,
        password=request.password,
    )
    return student_to_response(student)


def _upload(
    store: CredentialStore, ref: AccountRef, image: UploadFile, max_bytes: int
) -> ImageUploadResponse:
    data, content_type = read_image_upload(image, max_bytes, IMAGE_FIELD)
    store.set_profile_image(ref, data, content_type)
    return ImageUploadResponse(
        message="Profile image updated successfully",
        content_type=content_type,
        size=len(data),
    )


@router.get("", response_model=APIResponse[StudentListResponse])
def list_students(
    _identity: AdminIdentity,
    store: StoreDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = Query(default=None, description="Match against name or email"),
    sort: SortField = Query(default="created_at"),
    order: Literal["asc", "desc"] = Query(default="desc"),
) -> APIResponse[StudentListResponse]:
    """List students with pagination, search and sorting."""
    result = store.list_students(page=page, limit=limit, search=search, sort=sort, order=order)
    return APIResponse(data=student_page_to_response(result))


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    request: StudentCreate, _identity: AdminIdentity, store: StoreDep
) -> APIResponse[StudentResponse]:
    """Create a new student."""
    student = store.create_student(
        name=request.name,
        email=request.email,
        password=request.password,
        phone_number=request.phone_number,
        qualifications=request.qualifications,
        gender=request.gender,
    )
    return APIResponse(data=student_to_response(student))


# Self-service routes must be registered before /{student_id}


@router.get("/profile", response_model=APIResponse[StudentResponse])
def get_own_profile(identity: StudentIdentity, store: StoreDep) -> APIResponse[StudentResponse]:
    """Get the calling student's profile."""
    return APIResponse(data=student_to_response(store.get_student(identity.id)))


@router.put("/profile", response_model=APIResponse[StudentResponse])
def update_own_profile(
    request: StudentUpdate, identity: StudentIdentity, store: StoreDep
) -> APIResponse[StudentResponse]:
    """Update the calling student's profile."""
    return APIResponse(data=_update(store, identity.id, request))


@router.put("/profile/change-password", response_model=APIResponse[MessageResponse])
def change_own_password(
    request: ChangePasswordRequest, identity: StudentIdentity, auth: AuthServiceDep
) -> APIResponse[MessageResponse]:
    """Change the calling student's password."""
    auth.change_password(identity.ref, request.current_password, request.new_password)
    return APIResponse(data=MessageResponse(message="Password updated successfully"))


@router.post("/profile/picture", response_model=APIResponse[ImageUploadResponse])
@router.put("/profile/picture", response_model=APIResponse[ImageUploadResponse])
def upload_own_picture(
    identity: StudentIdentity,
    store: StoreDep,
    settings: SettingsDep,
    image: Annotated[UploadFile, File(alias=IMAGE_FIELD)],
) -> APIResponse[ImageUploadResponse]:
    """Upload or replace the calling student's profile image."""
    return APIResponse(data=_upload(store, identity.ref, image, settings.max_upload_bytes))


@router.get("/profile/picture", response_class=Response)
def get_own_picture(identity: StudentIdentity, store: StoreDep) -> Response:
    """Fetch the calling student's profile image."""
    return image_response(store.get_profile_image(identity.ref))


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(
    student_id: str, identity: CurrentIdentity, store: StoreDep
) -> APIResponse[StudentResponse]:
    """Get a student by ID. Students may only read their own record."""
    ensure_self_or_admin(identity, student_id)
    return APIResponse(data=student_to_response(store.get_student(student_id)))


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: str, request: StudentUpdate, identity: CurrentIdentity, store: StoreDep
) -> APIResponse[StudentResponse]:
    """Update a student. Students may only update their own record."""
    ensure_self_or_admin(identity, student_id)
    return APIResponse(data=_update(store, student_id, request))


@router.delete("/{student_id}", response_model=APIResponse[MessageResponse])
def delete_student(
    student_id: str, _identity: AdminIdentity, store: StoreDep
) -> APIResponse[MessageResponse]:
    """Delete a student."""
    store.delete_student(student_id)
    return APIResponse(data=MessageResponse(message="Student deleted successfully"))


@router.post("/{student_id}/profile-image", response_model=APIResponse[ImageUploadResponse])
def upload_student_image(
    student_id: str,
    identity: CurrentIdentity,
    store: StoreDep,
    settings: SettingsDep,
    image: Annotated[UploadFile, File(alias=IMAGE_FIELD)],
) -> APIResponse[ImageUploadResponse]:
    """Upload a student's profile image. Students may only upload their own."""
    ensure_self_or_admin(identity, student_id)
    ref = AccountRef.student(student_id)
    return APIResponse(data=_upload(store, ref, image, settings.max_upload_bytes))


@router.get("/{student_id}/profile-image", response_class=Response)
def get_student_image(student_id: str, _identity: CurrentIdentity, store: StoreDep) -> Response:
    """Fetch a student's profile image. Open to any authenticated caller."""
    return image_response(store.get_profile_image(AccountRef.student(student_id)))
