import sys
import os
import argparse
import logging
from sqlalchemy.orm import Session

# Ensure we can import payroll_api modules
sys.path.append(os.getcwd())

from payroll_api.database import SessionLocal, init_db
from payroll_api.models.user import User, UserRole
from payroll_api.core.exceptions import AppException
from payroll_api.services.auth import get_password_hash, normalize_email

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

def create_admin_user(email: str, password: str, name: str) -> int:
    init_db()
    db: Session = SessionLocal()
    try:
        email = normalize_email(email)

        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            logger.warning(f"User '{email}' already exists ({existing_user.role.value}).")
            return 1

        admin_user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRole.ADMIN,
        )
        db.add(admin_user)
        db.commit()
        db.refresh(admin_user)

        logger.info(f"Admin user created successfully (id={admin_user.id}). You can now login as {email}.")
        return 0

    except AppException as e:
        logger.error(f"Invalid admin account: {e.errors or e.message}")
        return 1
    except Exception as e:
        logger.error(f"Error creating admin user: {e}")
        db.rollback()
        return 1
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default="System Administrator")
    args = parser.parse_args()

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters")
    sys.exit(create_admin_user(args.email, args.password, args.name))
