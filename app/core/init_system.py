import logging
from decimal import Decimal
from app.database import SessionLocal
from app.models.leave_type import LeaveType

logger = logging.getLogger(__name__)

# code, name, default days, paid, carry over
DEFAULT_LEAVE_TYPES = (
    ("AL", "Annual Leave", Decimal("14"), True, True),
    ("SL", "Sick Leave", Decimal("14"), True, False),
    ("MC", "Medical Leave", Decimal("14"), True, False),
    ("CL", "Compassionate Leave", Decimal("3"), True, False),
    ("ML", "Maternity Leave", Decimal("112"), True, False),
    ("PL", "Paternity Leave", Decimal("14"), True, False),
    ("NPL", "No-Pay Leave", Decimal("0"), False, False),
)


def seed_leave_types(db) -> int:
    """Insert any missing catalogue entries. Returns the number created."""
    existing = {code for (code,) in db.query(LeaveType.code).all()}
    created = 0
    for code, name, days, is_paid, carry_over in DEFAULT_LEAVE_TYPES:
        if code in existing:
            continue
        db.add(LeaveType(
            code=code,
            name=name,
            default_days=days,
            is_paid=is_paid,
            carry_over=carry_over,
            max_carry_over=Decimal("0"),
        ))
        created += 1
    return created


def init_system_data():
    """
    Checks if the system needs initialization.
    Seeds the leave type catalogue on first start.
    """
    db = SessionLocal()
    try:
        created = seed_leave_types(db)
        if created:
            db.commit()
            logger.info(f"✓ Seeded {created} leave type(s)")
        else:
            logger.info("System initialization check: leave types present.")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
