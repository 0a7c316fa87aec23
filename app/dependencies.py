"""
Service providers for the dashboard routes.
Tests override get_session_factory to point the pipelines at a test database.
"""
from typing import Callable
from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_session_factory
from app.routers.auth_deps import get_bearer_token
from app.services.admin_dashboard import AdminDashboardService
from app.services.employee_dashboard import EmployeeDashboardService


def get_admin_dashboard_service(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> AdminDashboardService:
    return AdminDashboardService(session_factory)


def get_employee_dashboard_service(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> EmployeeDashboardService:
    return EmployeeDashboardService(session_factory)


__all__ = [
    "get_bearer_token",
    "get_session_factory",
    "get_admin_dashboard_service",
    "get_employee_dashboard_service",
]
