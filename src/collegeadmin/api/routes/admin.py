"""Admin self-service and dashboard endpoints."""

from typing import Annotated

from fastapi import APIRouter, File, Response, UploadFile

from collegeadmin.api.dependencies import AdminIdentity, AuthServiceDep, SettingsDep, StoreDep
from collegeadmin.api.models import (
    AdminProfileUpdate,
    AdminResponse,
    APIResponse,
    ChangePasswordRequest,
    DashboardStatsResponse,
    ImageUploadResponse,
    MessageResponse,
    admin_to_response,
    stats_to_response,
)
from collegeadmin.api.uploads import image_response, read_image_upload

router = APIRouter(prefix="/admin", tags=["admin"])

PICTURE_FIELD = "profilePicture"


@router.get("/profile", response_model=APIResponse[AdminResponse])
def get_profile(identity: AdminIdentity, store: StoreDep) -> APIResponse[AdminResponse]:
    """Get the calling admin's profile."""
    admin = store.get_admin(identity.id)
    return APIResponse(data=admin_to_response(admin))


@router.put("/profile", response_model=APIResponse[AdminResponse])
def update_profile(
    request: AdminProfileUpdate, identity: AdminIdentity, store: StoreDep
) -> APIResponse[AdminResponse]:
    """Update the calling admin's name and/or email."""
    admin = store.update_admin(identity.id, name=request.name, email=request.email)
    return APIResponse(data=admin_to_response(admin))


@router.put("/change-password", response_model=APIResponse[MessageResponse])
def change_password(
    request: ChangePasswordRequest, identity: AdminIdentity, auth: AuthServiceDep
) -> APIResponse[MessageResponse]:
    """Change the calling admin's password."""
    auth.change_password(identity.ref, request.current_password, request.new_password)
    return APIResponse(data=MessageResponse(message="Password updated successfully"))


@router.post("/profile/picture", response_model=APIResponse[ImageUploadResponse])
@router.put("/profile/picture", response_model=APIResponse[ImageUploadResponse])
def upload_picture(
    identity: AdminIdentity,
    store: StoreDep,
    settings: SettingsDep,
    picture: Annotated[UploadFile, File(alias=PICTURE_FIELD)],
) -> APIResponse[ImageUploadResponse]:
    """Upload or replace the calling admin's profile picture."""
    data, content_type = read_image_upload(picture, settings.max_upload_bytes, PICTURE_FIELD)
    store.set_profile_image(identity.ref, data, content_type)
    return APIResponse(
        data=ImageUploadResponse(
            message="Profile picture updated successfully",
            content_type=content_type,
            size=len(data),
        )
    )


@router.get("/profile/picture", response_class=Response)
def get_picture(identity: AdminIdentity, store: StoreDep) -> Response:
    """Fetch the calling admin's profile picture."""
    return image_response(store.get_profile_image(identity.ref))


@router.get("/dashboard/stats", response_model=APIResponse[DashboardStatsResponse])
def dashboard_stats(_identity: AdminIdentity, store: StoreDep) -> APIResponse[DashboardStatsResponse]:
    """Roster statistics for the admin dashboard."""
    return APIResponse(data=stats_to_response(store.get_student_stats()))
