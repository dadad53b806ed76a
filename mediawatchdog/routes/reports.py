"""
reports.py — Downloadable text report.

Routes:
  POST /api/v1/reports/download — render an AnalysisResult as a .txt attachment

The body is the AnalysisResult exactly as returned by /api/v1/analyze/*.
Nothing is stored; the report is rebuilt from the posted result each time.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from mediawatchdog.models.analysis import AnalysisResult
from mediawatchdog.services.report_builder import build_report, report_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.post("/download", response_class=PlainTextResponse, status_code=200)
async def download_report(result: AnalysisResult):
    """Return the fixed-layout plain-text report as a file download."""
    filename = report_filename()
    logger.info("Report generated for %s → %s", result.file_name, filename)
    return PlainTextResponse(
        build_report(result),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
