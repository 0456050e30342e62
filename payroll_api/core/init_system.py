import logging
from payroll_api.core.config import settings
from payroll_api.database import SessionLocal
from payroll_api.models.user import User, UserRole
from payroll_api.services import auth as auth_service

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Creates the first admin account from BOOTSTRAP_ADMIN_EMAIL /
    BOOTSTRAP_ADMIN_PASSWORD when the users table is empty.
    Does nothing unless both variables are set.
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return

    db = SessionLocal()
    try:
        user_count = db.query(User).count()
        if user_count == 0:
            logger.info("Running startup initialization...")
            admin_user = User(
                name="Administrator",
                email=auth_service.normalize_email(settings.bootstrap_admin_email),
                hashed_password=auth_service.get_password_hash(settings.bootstrap_admin_password),
                role=UserRole.ADMIN,
            )
            db.add(admin_user)
            db.commit()
            logger.info(f"Created bootstrap admin: {admin_user.email}")
        else:
            logger.info(f"System initialization check: {user_count} user(s) found.")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
