"""
Pytest configuration and fixtures for PetFriendly Backend tests.
"""

import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
_TEST_ROOT = tempfile.mkdtemp(prefix="petfriendly_test_")
os.environ["PETFRIENDLY_DB_PATH"] = os.path.join(_TEST_ROOT, "petfriendly.db")
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["JWT_SECRET"] = "test-jwt-secret-0123456789abcdef"
os.environ["SEED_DEMO_ACCOUNTS"] = "false"
os.environ["ADOPTION_STRICT_TRANSITIONS"] = "false"
os.environ["S3_BUCKET_NAME"] = ""

from petfriendly_backend.adoption_service import AdoptionRequestService  # noqa: E402
from petfriendly_backend.contact_service import ContactMessageService  # noqa: E402
from petfriendly_backend.database import Database  # noqa: E402
from petfriendly_backend.dependencies import get_database, get_user_service  # noqa: E402
from petfriendly_backend.foundation_service import FoundationService  # noqa: E402
from petfriendly_backend.main import app  # noqa: E402
from petfriendly_backend.models import (  # noqa: E402
    FoundationCreateRequest,
    PetCreateRequest,
    PetSpecies,
    Role,
    UserCreateRequest,
)
from petfriendly_backend.pet_image_service import PetImageService  # noqa: E402
from petfriendly_backend.pet_service import PetService  # noqa: E402
from petfriendly_backend.security import create_access_token  # noqa: E402
from petfriendly_backend.storage import ImageStorage  # noqa: E402
from petfriendly_backend.user_service import UserService  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_dirs():
    """Remove the temporary database and uploads after the session."""
    yield _TEST_ROOT
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_database():
    """Every test starts from empty tables."""
    get_database().truncate()
    yield


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


# Services over an isolated database


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "services.db")


@pytest.fixture
def user_service(db):
    return UserService(db)


@pytest.fixture
def foundation_service(db):
    return FoundationService(db)


@pytest.fixture
def pet_service(db):
    return PetService(db)


@pytest.fixture
def pet_image_service(db, tmp_path):
    return PetImageService(db, ImageStorage(tmp_path / "uploads"))


@pytest.fixture
def adoption_service(db):
    return AdoptionRequestService(db, strict_transitions=False)


@pytest.fixture
def contact_service(db):
    return ContactMessageService(db)


@pytest.fixture
def applicant(user_service):
    return user_service.create(
        UserCreateRequest(first_name="Ana", last_name="Rojas", email="ana@petfriendly.dev", password="secret123")
    )


@pytest.fixture
def foundation(foundation_service):
    return foundation_service.create(
        FoundationCreateRequest(name="Huellitas", city="Bogota", contact_email="hola@huellitas.org")
    )


@pytest.fixture
def pet(pet_service, foundation):
    return pet_service.create(PetCreateRequest(name="Max", species=PetSpecies.DOG, age=3, foundation_id=foundation.id))


# Accounts and tokens against the application database


def _account(role: Role, email: str):
    user = get_user_service().create(
        UserCreateRequest(first_name="Test", last_name=role.display_name, email=email, password="secret123", role=role)
    )
    return user, {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def user_account():
    """A USER account and its bearer headers."""
    return _account(Role.USER, "user@petfriendly.dev")


@pytest.fixture
def other_user_account():
    return _account(Role.USER, "other@petfriendly.dev")


@pytest.fixture
def foundation_admin_account():
    return _account(Role.FOUNDATION_ADMIN, "foundation@petfriendly.dev")


@pytest.fixture
def super_admin_account():
    return _account(Role.SUPER_ADMIN, "root@petfriendly.dev")


@pytest.fixture
def user_headers(user_account):
    return user_account[1]


@pytest.fixture
def admin_headers(foundation_admin_account):
    return foundation_admin_account[1]


@pytest.fixture
def super_admin_headers(super_admin_account):
    return super_admin_account[1]


@pytest.fixture
def api_foundation(client, admin_headers):
    """A foundation created through the API."""
    response = client.post(
        "/api/v1/foundations",
        json={"name": "Patitas", "city": "Medellin", "state": "Antioquia", "contact_email": "info@patitas.org"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def api_pet(client, admin_headers, api_foundation):
    """A pet created through the API."""
    response = client.post(
        "/api/v1/pets",
        json={"name": "Luna", "species": "CAT", "age": 2, "gender": "FEMALE", "foundation_id": api_foundation["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()
