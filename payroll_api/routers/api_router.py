from fastapi import APIRouter
from payroll_api.routers import auth, employee, payroll, dashboard

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(employee.router, tags=["Employees"])
api_router.include_router(payroll.router, tags=["Payroll"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
