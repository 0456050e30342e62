from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from payroll_api.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    base_salary = Column(Float, nullable=False)
    allowance = Column(Float, default=0.0, nullable=False)
    deduction = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="employee_profile")
    payrolls = relationship("Payroll", back_populates="employee", cascade="all, delete-orphan")

    # Derived figures; only Payroll snapshots persist them
    @property
    def gross_salary(self) -> float:
        return self.base_salary + self.allowance

    @property
    def net_salary(self) -> float:
        return self.gross_salary - self.deduction

    def __repr__(self):
        return f"<Employee {self.id} user={self.user_id}>"
