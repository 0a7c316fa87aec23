from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.exceptions import status_code_for
from app.core.schemas import ApiResponse
from app.dependencies import get_admin_dashboard_service, get_employee_dashboard_service
from app.routers.auth_deps import get_bearer_token
from app.schemas.dashboard import AdminDashboardData, EmployeeDashboardData
from app.services.admin_dashboard import AdminDashboardService
from app.services.employee_dashboard import EmployeeDashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _respond(envelope: ApiResponse) -> JSONResponse:
    if envelope.success:
        return JSONResponse(status_code=200, content=envelope.to_dict())
    status_code = status_code_for(envelope.error.code)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=envelope.to_dict(), headers=headers)


@router.get("/admin", response_model=ApiResponse[AdminDashboardData])
def admin_dashboard(
    period: Optional[str] = Query(None, description="Period identifier, e.g. 2025-Q1"),
    day: Optional[date] = Query(None, description="Reporting day, defaults to today (UTC)"),
    token: Optional[str] = Depends(get_bearer_token),
    service: AdminDashboardService = Depends(get_admin_dashboard_service),
):
    """
    Team dashboard for admins and stakeholders. READ-ONLY.
    """
    return _respond(service.get_dashboard(token, period=period, today=day))


@router.get("/employee", response_model=ApiResponse[EmployeeDashboardData])
def employee_dashboard(
    period: Optional[str] = Query(None, description="Period identifier, e.g. 2025-Q1"),
    token: Optional[str] = Depends(get_bearer_token),
    service: EmployeeDashboardService = Depends(get_employee_dashboard_service),
):
    """
    The caller's own dashboard: leave, attendance, projects and reviews.
    """
    return _respond(service.get_dashboard(token, period=period))
