"""REST API for College Admin."""

from collegeadmin.api.app import app, create_app
from collegeadmin.api.models import APIResponse

__all__ = [
    "APIResponse",
    "app",
    "create_app",
]
