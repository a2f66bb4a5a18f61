"""
Test configuration and fixtures for the Real Estate CRM API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="crm-uploads-"))
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import io
import uuid
import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport
from PIL import Image as PILImage

from app.main import app
from app.database import Base, get_db
from app import models  # noqa: F401
from app.models.user import User, UserRole
from app.models.client import Client, ClientRole, ClientStatus
from app.models.property import (
    Property,
    PropertyType,
    ConditionStatus,
    TransactionType,
    PropertyStatus,
)
from app.models.rental import RentalContract, ContractStatus
from app.repositories.user import UserRepository
from app.repositories.client import ClientRepository
from app.repositories.property import PropertyRepository
from app.repositories.rental import ContractRepository
from app.services.auth import AuthService
from app.services.calendar import CalendarService
from app.utils.auth import create_access_token


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "testpassword123"


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by fixtures and service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with one database session per request, as in production."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def client_repository(db_session: AsyncSession) -> ClientRepository:
    return ClientRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def contract_repository(db_session: AsyncSession) -> ContractRepository:
    return ContractRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def calendar_service(db_session: AsyncSession) -> CalendarService:
    return CalendarService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.AGENT,
        is_active: bool = True
    ) -> User:
        return await user_repo.create_user({
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "is_active": is_active,
        })


class ClientFactory:
    """Factory for creating test clients."""

    @staticmethod
    def create_client_data(
        name: str = "Test Client",
        email: Optional[str] = None,
        phone: str = "+216 20 000 000",
        role: ClientRole = ClientRole.TENANT,
        status: ClientStatus = ClientStatus.ACTIVE,
        **extra
    ) -> dict:
        return {
            "name": name,
            "email": email or f"client{uuid.uuid4().hex[:8]}@example.com",
            "phone": phone,
            "role": role,
            "status": status,
            **extra,
        }

    @staticmethod
    async def create_client(client_repo: ClientRepository, **kwargs) -> Client:
        data = ClientFactory.create_client_data(**kwargs)
        return await client_repo.create(data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        property_id: Optional[str] = None,
        title: str = "Test Apartment",
        type: PropertyType = PropertyType.APARTMENT,
        condition_status: ConditionStatus = ConditionStatus.GOOD_CONDITION,
        transaction_type: TransactionType = TransactionType.RENTAL,
        surface: int = 90,
        rooms: int = 3,
        price: Decimal = Decimal("1200.00"),
        location: str = "La Marsa, Tunis",
        owner_id: Optional[uuid.UUID] = None,
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        **extra
    ) -> dict:
        return {
            "property_id": property_id or f"REF-{uuid.uuid4().hex[:8].upper()}",
            "title": title,
            "type": type,
            "condition_status": condition_status,
            "transaction_type": transaction_type,
            "surface": surface,
            "rooms": rooms,
            "price": price,
            "location": location,
            "owner_id": owner_id,
            "status": status,
            **extra,
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, **kwargs) -> Property:
        data = PropertyFactory.create_property_data(**kwargs)
        return await property_repo.create(data)


class ContractFactory:
    """Factory for creating test rental contracts."""

    @staticmethod
    def create_contract_data(
        property_id: uuid.UUID,
        tenant_id: uuid.UUID,
        owner_id: uuid.UUID,
        start_date: Optional[date] = None,
        months: int = 12,
        monthly_rent: Decimal = Decimal("1200.00"),
        status: ContractStatus = ContractStatus.PENDING,
        **extra
    ) -> dict:
        start = start_date or date.today()
        return {
            "property_id": property_id,
            "tenant_id": tenant_id,
            "owner_id": owner_id,
            "start_date": start,
            "end_date": start + timedelta(days=30 * months),
            "monthly_rent": monthly_rent,
            "deposit": monthly_rent * 2,
            "status": status,
            "payment_day": 1,
            **extra,
        }

    @staticmethod
    async def create_contract(contract_repo: ContractRepository, **kwargs) -> RentalContract:
        data = ContractFactory.create_contract_data(**kwargs)
        return await contract_repo.create(data)


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


def make_png(width: int = 32, height: int = 24, color: str = "red") -> bytes:
    """Small valid PNG for upload tests."""
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@test.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent@test.com",
        name="Test Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@test.com",
        name="Inactive User",
        is_active=False
    )


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return auth_headers_for(test_admin)


@pytest.fixture
def agent_headers(test_agent: User) -> Dict[str, str]:
    return auth_headers_for(test_agent)


@pytest.fixture
async def test_owner(client_repository: ClientRepository) -> Client:
    return await ClientFactory.create_client(
        client_repository,
        name="Olfa Owner",
        email="owner@example.com",
        role=ClientRole.OWNER
    )


@pytest.fixture
async def test_tenant(client_repository: ClientRepository) -> Client:
    return await ClientFactory.create_client(
        client_repository,
        name="Tarek Tenant",
        email="tenant@example.com",
        phone="+216 50 111 222",
        role=ClientRole.TENANT
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_owner: Client) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        property_id="APT-001",
        title="Sea view apartment",
        owner_id=test_owner.id
    )


@pytest.fixture
async def test_contract(
    contract_repository: ContractRepository,
    test_property: Property,
    test_tenant: Client,
    test_owner: Client
) -> RentalContract:
    return await ContractFactory.create_contract(
        contract_repository,
        property_id=test_property.id,
        tenant_id=test_tenant.id,
        owner_id=test_owner.id
    )


def assert_error(response, status_code: int, message: Optional[str] = None) -> dict:
    """Assert a response carries the standard error envelope."""
    assert response.status_code == status_code, response.text
    error = response.json()["error"]
    assert {"code", "message", "timestamp", "request_id"} <= error.keys()
    if message is not None:
        assert message in error["message"]
    return error
