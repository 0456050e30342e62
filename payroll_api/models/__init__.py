# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, employee, payroll

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .employee import Employee
from .payroll import Payroll

__all__ = [
    "User",
    "UserRole",
    "Employee",
    "Payroll",
]
