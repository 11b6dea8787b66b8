from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from garage_admin.clients.backend import BinaryPayload
from garage_admin.schemas.report import DashboardSummary, ExportFormat, ReportQuery, ReportType
from garage_admin.services.base import BackendService
from garage_admin.services.payloads import build_report_params
from garage_admin.services.query_cache import make_key

logger = logging.getLogger(__name__)


class ReportService(BackendService):
    async def dashboard(self, *, month: Optional[int] = None, year: Optional[int] = None) -> DashboardSummary:
        today = date.today()
        params = {"month": month or today.month, "year": year or today.year}

        async def load() -> DashboardSummary:
            return DashboardSummary(**await self._client.get("/reports/dashboard", params))

        return await self._cached(make_key("reports:dashboard", params), "load dashboard", load)

    async def report(self, report_type: ReportType, query: ReportQuery) -> Dict[str, Any]:
        params = build_report_params(query)
        logger.info("Loading %s report %s", report_type, params)

        async def load() -> Dict[str, Any]:
            return await self._client.get(f"/reports/{report_type}", params) or {}

        return await self._cached(make_key("reports", report_type, params), f"load {report_type} report", load)

    async def export(self, report_type: ReportType, fmt: ExportFormat, query: ReportQuery) -> BinaryPayload:
        params = build_report_params(query)
        logger.info("Exporting %s report as %s", report_type, fmt)
        return await self._call(
            f"export {report_type} report",
            lambda: self._client.get_binary(f"/reports/{report_type}/{fmt}", params),
        )
