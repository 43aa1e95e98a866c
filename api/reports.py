"""GET /api/reports/summary: headline numbers for the reports page."""

from fastapi import APIRouter

from core.services.report_service import ReportService


def create_reports_router(report_service: ReportService) -> APIRouter:
    router = APIRouter(prefix="/reports", tags=["reports"])

    @router.get("/summary")
    async def report_summary():
        return report_service.summary().model_dump(mode="json")

    return router
