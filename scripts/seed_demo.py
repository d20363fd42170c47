"""
Seed a local database with the leave type catalogue and a few employees,
then print an access token for each role.

    python -m scripts.seed_demo
"""
from datetime import date
from decimal import Decimal

from app.core.init_system import seed_leave_types
from app.database import SessionLocal, init_db
from app.models.employee import Employee
from app.models.salary_info import SalaryInfo
from app.services.auth import create_access_token

DEMO_EMPLOYEES = (
    ("E0001", "Alice Tan", "alice@example.com", date(2021, 3, 1), date(1990, 6, 15), "5200", "300", "STAFF"),
    ("E0002", "Marcus Lim", "marcus@example.com", date(2018, 1, 2), date(1982, 2, 9), "7800", "500", "MANAGER"),
    ("E0003", "Priya Nair", "priya@example.com", date(2019, 8, 19), date(1968, 11, 30), "6400", "0", "HR"),
)


def seed():
    init_db()
    db = SessionLocal()
    try:
        created = seed_leave_types(db)
        print(f"Leave types created: {created}")

        for code, name, email, start, dob, basic, allowances, role in DEMO_EMPLOYEES:
            employee = db.query(Employee).filter(Employee.employee_code == code).first()
            if not employee:
                employee = Employee(
                    employee_code=code,
                    name=name,
                    email=email,
                    start_date=start,
                    date_of_birth=dob,
                )
                employee.salary_info = SalaryInfo(basic_salary=Decimal(basic), allowances=Decimal(allowances))
                db.add(employee)
                db.commit()
                print(f"Created employee {code}: {name}")

            token = create_access_token({
                "sub": email,
                "role": role,
                "employee_id": employee.id,
                "type": "access",
            })
            print(f"{role:<8} {email}: {token}")

        admin_token = create_access_token({"sub": "admin@example.com", "role": "ADMIN", "type": "access"})
        print(f"{'ADMIN':<8} admin@example.com: {admin_token}")
    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
