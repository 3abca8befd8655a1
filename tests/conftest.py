"""
Binary Hub - test configuration and fixtures
"""
import os
import tempfile
import uuid
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from faker import Faker
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

# Set testing environment before the app is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-jwt-secret-key-for-testing"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="binaryhub-uploads-")
os.environ["ALLOW_ADMIN_SIGNUP"] = "true"
os.environ["TELEGRAM_BOT_TOKEN"] = ""

from binaryhub.config import CONFIG
from binaryhub.db import init_models
from binaryhub.models import Admin, Applicant, CourseRef, Enrollment, Payment, User
from binaryhub.security import create_access_token, hash_password
from binaryhub.web import app

fake = Faker()

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest_asyncio.fixture(autouse=True)
async def db():
    """Fresh in-memory MongoDB with all documents registered"""
    client = AsyncMongoMockClient()
    database = client.get_database(name=f"binaryhub_test_{uuid.uuid4().hex[:8]}")
    await init_models(database)
    yield database


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """Point uploads at a per-test directory"""
    root = tmp_path / "uploads"
    root.mkdir()
    monkeypatch.setattr(CONFIG, "UPLOADS_DIR", root)
    return root


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def bearer(account, role: str) -> dict:
    token = create_access_token(str(account.id), account.email, role)
    return {"Authorization": f"Bearer {token}"}


async def _create_account(model, password: str):
    account = model(
        full_name=fake.name(),
        email=fake.unique.email(),
        password_hash=hash_password(password),
    )
    await account.insert()
    return account


@pytest_asyncio.fixture
async def user() -> User:
    return await _create_account(User, "userpassword123")


@pytest_asyncio.fixture
async def other_user() -> User:
    return await _create_account(User, "otherpassword123")


@pytest_asyncio.fixture
async def admin() -> Admin:
    return await _create_account(Admin, "adminpassword123")


@pytest.fixture
def user_headers(user) -> dict:
    return bearer(user, "user")


@pytest.fixture
def other_headers(other_user) -> dict:
    return bearer(other_user, "user")


@pytest.fixture
def admin_headers(admin) -> dict:
    return bearer(admin, "admin")


@pytest.fixture
def png():
    """Multipart tuple for a small PNG upload"""
    def _png(name: str = "proof.png"):
        return (name, PNG_BYTES, "image/png")
    return _png


@pytest.fixture
def make_enrollment():
    """Insert an enrollment directly, bypassing the HTTP layer"""
    async def _make(
        owner,
        slug: str = "web-dev",
        status: str = "approved",
        expires_in: timedelta = None,
        **fields,
    ) -> Enrollment:
        now = datetime.utcnow()
        enrollment = Enrollment(
            course=CourseRef(slug=slug, title=slug.replace("-", " ").title()),
            user=Applicant(user_id=owner.id, full_name=owner.full_name, email=owner.email),
            payment=Payment(method="bank", screenshot="/uploads/enrollments/proof.png"),
            status=status,
            **fields,
        )
        if expires_in is not None:
            enrollment.purchase_date = now + expires_in - timedelta(days=30)
            enrollment.expiration_date = now + expires_in
        await enrollment.insert()
        return enrollment
    return _make
