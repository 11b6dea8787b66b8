from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from garage_admin.dependencies.services import get_report_service
from garage_admin.routes.common import binary_response, to_http_exception
from garage_admin.schemas.report import DashboardSummary, ExportFormat, ReportQuery, ReportType, Timeframe
from garage_admin.services import ReportService
from garage_admin.services.exceptions import ServiceError

router = APIRouter()

_EXTENSIONS = {"pdf": "pdf", "excel": "xlsx"}


def _report_query(
    timeframe: Timeframe = Query("monthly"),
    anchor: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> ReportQuery:
    return ReportQuery(timeframe=timeframe, date=anchor, start_date=start_date, end_date=end_date)


@router.get("/reports/dashboard", response_model=DashboardSummary)
async def dashboard(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    service: ReportService = Depends(get_report_service),
):
    try:
        return await service.dashboard(month=month, year=year)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/reports/{report_type}")
async def report(
    report_type: ReportType,
    query: ReportQuery = Depends(_report_query),
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    try:
        return await service.report(report_type, query)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc


@router.get("/reports/{report_type}/{fmt}")
async def export_report(
    report_type: ReportType,
    fmt: ExportFormat,
    query: ReportQuery = Depends(_report_query),
    service: ReportService = Depends(get_report_service),
):
    try:
        payload = await service.export(report_type, fmt, query)
    except ServiceError as exc:
        raise to_http_exception(exc) from exc
    return binary_response(payload, f"{report_type}-report.{_EXTENSIONS[fmt]}")
