from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from formrelay.api.contracts import ReportErrorResponse, ReportResponse
from formrelay.api.services.reporting import SchemaClientGetter, SinksGetter, assemble_report
from formrelay.config import settings
from formrelay.intake import build_submission
from formrelay.notifications import relay_report
from formrelay.observability import sanitize_for_logging


logger = logging.getLogger("formrelay.api")


def build_report_router(
    *,
    get_sinks: SinksGetter,
    get_schema_client: SchemaClientGetter,
) -> APIRouter:
    router = APIRouter()

    @router.post("/api/report", response_model=None)
    async def receive_report(request: Request) -> JSONResponse:
        try:
            form = await request.form()
            submission = await build_submission(form.multi_items())
            report = await assemble_report(
                submission,
                settings=settings,
                get_schema_client=get_schema_client,
            )
            logger.info(
                "report_parsed",
                extra={
                    "event": "report_parsed",
                    "form_title": report.title,
                    "answer_count": len(report.answers),
                    "answers": sanitize_for_logging([pair.as_dict() for pair in report.answers]),
                },
            )
            deliveries = await relay_report(report, get_sinks())
        except Exception:
            logger.exception("report_handling_failed", extra={"event": "report_handling_failed"})
            return JSONResponse(status_code=400, content=ReportErrorResponse().model_dump())

        logger.info("report_relayed", extra={"event": "report_relayed", "deliveries": deliveries})
        return JSONResponse(status_code=200, content=ReportResponse.from_report(report).model_dump())

    return router
