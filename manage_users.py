"""
Operator script for the clinic database
Usage:
    python manage_users.py create-tables
    python manage_users.py add-user <username> <password> <name> [doctor|esthetician]
    python manage_users.py change-password <username> <new_password>
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from clinic_api import models  # noqa: E402,F401
from clinic_api.config import STRICT_PASSWORD_VALIDATION  # noqa: E402
from clinic_api.database import Base, SessionLocal, engine  # noqa: E402
from clinic_api.models import DEFAULT_SERVICE_TYPE, SERVICE_TYPES, User  # noqa: E402
from clinic_api.security_utils import hash_password_bcrypt, validate_password  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def check_password(password: str) -> bool:
    result = validate_password(password, strict=STRICT_PASSWORD_VALIDATION)
    if not result["valid"]:
        logger.error("❌ Password validation failed:")
        for error in result["errors"]:
            logger.error(f"   - {error}")
    return result["valid"]


def create_tables():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("✅ Tables created")


def add_user(username: str, password: str, name: str, role: str = DEFAULT_SERVICE_TYPE) -> bool:
    if role not in SERVICE_TYPES:
        logger.error(f"❌ Unknown role '{role}'. Expected one of: {', '.join(SERVICE_TYPES)}")
        return False
    if not check_password(password):
        return False

    db = SessionLocal()
    try:
        if db.query(User).filter(User.username == username).first():
            logger.error(f"❌ User '{username}' already exists")
            return False
        db.add(
            User(username=username, password_hash=hash_password_bcrypt(password), role=role, name=name)
        )
        db.commit()
        logger.info(f"✅ Created user '{username}' ({role})")
        return True
    finally:
        db.close()


def change_password(username: str, new_password: str) -> bool:
    if not check_password(new_password):
        return False

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.username == username).first()
        if not user:
            logger.error(f"❌ User '{username}' not found")
            return False
        logger.info(f"👤 Found user: {user.name} ({user.role})")
        user.password_hash = hash_password_bcrypt(new_password)
        db.commit()
        logger.info(f"✅ Password changed successfully for user '{username}'")
        # Tokens are stateless; old ones stay valid until they expire
        logger.info("⚠️  Existing tokens for this user remain valid until they expire.")
        return True
    finally:
        db.close()


COMMANDS = {
    "create-tables": (create_tables, 0, 0),
    "add-user": (add_user, 3, 4),
    "change-password": (change_password, 2, 2),
}


if __name__ == "__main__":
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        logger.error(__doc__)
        sys.exit(1)

    command, min_args, max_args = COMMANDS[sys.argv[1]]
    args = sys.argv[2:]
    if not min_args <= len(args) <= max_args:
        logger.error(__doc__)
        sys.exit(1)

    try:
        ok = command(*args)
    except Exception as e:
        logger.error(f"❌ {sys.argv[1]} failed: {e}")
        sys.exit(1)
    sys.exit(0 if ok is not False else 1)
