import pytest
import os
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db, enable_sqlite_savepoints
from app.main import app
from app.core.init_system import seed_leave_types
from app.models.employee import Employee
from app.models.leave_type import LeaveType
from app.models.salary_info import SalaryInfo
from app.schemas.auth import Actor, UserRole
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Mid-December: prorated entitlements are close to the full year
TODAY = date(2030, 12, 15)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Clean database session per test. Service commits and rollbacks act on
    savepoints; the outer transaction is rolled back at the end.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def leave_types(db_session):
    """The default leave type catalogue, keyed by code."""
    seed_leave_types(db_session)
    db_session.commit()
    return {lt.code: lt for lt in db_session.query(LeaveType).all()}


@pytest.fixture(scope="function")
def make_employee(db_session):
    counter = {"n": 0}

    def _make_employee(
        name=None,
        start_date=date(2020, 1, 1),
        date_of_birth=date(1990, 6, 15),
        basic_salary=None,
        allowances=Decimal("0"),
        status="ACTIVE",
    ):
        counter["n"] += 1
        employee = Employee(
            employee_code=f"E{counter['n']:04d}",
            name=name or f"Employee {counter['n']}",
            email=f"employee{counter['n']}@example.com",
            start_date=start_date,
            date_of_birth=date_of_birth,
            status=status,
        )
        if basic_salary is not None:
            employee.salary_info = SalaryInfo(basic_salary=Decimal(basic_salary), allowances=Decimal(allowances))
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make_employee


@pytest.fixture(scope="function")
def employee(make_employee):
    return make_employee(name="Alice Tan")


@pytest.fixture(scope="function")
def manager(make_employee):
    return make_employee(name="Marcus Lim")


@pytest.fixture(scope="function")
def staff_actor(employee):
    return Actor(user_id="user-alice", role=UserRole.STAFF, employee_id=employee.id)


@pytest.fixture(scope="function")
def manager_actor(manager):
    return Actor(user_id="user-marcus", role=UserRole.MANAGER, employee_id=manager.id)


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a role."""
    from app.services.auth import create_access_token

    def _get_token(role, employee_id=None, sub="user-1"):
        return create_access_token(data={
            "sub": sub,
            "role": role.value if isinstance(role, UserRole) else role,
            "employee_id": employee_id,
            "type": "access"
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(role, employee_id=None, sub="user-1"):
        return {"Authorization": f"Bearer {get_token(role, employee_id, sub)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
