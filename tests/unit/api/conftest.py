"""Fixtures for route tests: a bare app wired to in-memory services."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from collegeadmin.api.app import API_PREFIX, register_exception_handlers
from collegeadmin.api.dependencies import get_auth_service, get_settings, get_store
from collegeadmin.api.routes import admin, auth, health, students
from collegeadmin.auth import AuthService
from collegeadmin.config import Settings
from collegeadmin.credential_store import CredentialStore, Student


@pytest.fixture
def auth_service(store: CredentialStore, settings: Settings) -> AuthService:
    return AuthService(store, settings)


@pytest.fixture
def app(store: CredentialStore, settings: Settings, auth_service: AuthService) -> FastAPI:
    """Create a test FastAPI app with overridden dependencies."""
    app = FastAPI()

    def override_get_store():
        yield store

    def override_get_auth_service():
        yield auth_service

    def override_get_settings():
        yield settings

    app.dependency_overrides[get_store] = override_get_store
    app.dependency_overrides[get_auth_service] = override_get_auth_service
    app.dependency_overrides[get_settings] = override_get_settings

    register_exception_handlers(app)

    for module in (auth, admin, students, health):
        app.include_router(module.router, prefix=API_PREFIX)

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def admin_token(auth_service: AuthService) -> str:
    """Bearer token of a freshly registered admin."""
    return auth_service.register("Ada Admin", "ada@college.edu", "Secret123").token


@pytest.fixture
def student(store: CredentialStore) -> Student:
    return store.create_student(
        name="Grace Hopper",
        email="grace@college.edu",
        password="secret1",
        phone_number="+1 555 0100",
        qualifications=["BSc Computer Science"],
        gender="female",
    )


@pytest.fixture
def student_token(auth_service: AuthService, student: Student) -> str:
    """Bearer token of the ``student`` fixture."""
    return auth_service.student_login(student.email, "secret1").token
