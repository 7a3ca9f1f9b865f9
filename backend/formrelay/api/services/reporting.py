from __future__ import annotations

import logging
from typing import Callable

from formrelay.answers.assembler import (
    PRETTY_FIELD,
    RAW_ANSWERS_FIELD,
    build_raw_answer_report,
    build_report,
)
from formrelay.answers.models import Report, Submission
from formrelay.config import Settings
from formrelay.form_schema import FormSchemaClient
from formrelay.notifications import ReportSink


logger = logging.getLogger("formrelay.api")

FORM_ID_FIELD = "formID"

SinksGetter = Callable[[], list[ReportSink]]
SchemaClientGetter = Callable[[], FormSchemaClient | None]


def select_answer_source(submission: Submission, configured: str) -> str:
    """`raw` when configured, or when `pretty` is blank but a raw answer map exists."""
    if configured.strip().lower() == "raw" and submission.get_text(RAW_ANSWERS_FIELD).strip():
        return "raw"
    if not submission.get_text(PRETTY_FIELD).strip() and submission.get_text(RAW_ANSWERS_FIELD).strip():
        return "raw"
    return "pretty"


async def assemble_report(
    submission: Submission,
    *,
    settings: Settings,
    get_schema_client: SchemaClientGetter,
) -> Report:
    source = select_answer_source(submission, settings.answer_source)
    if source == "pretty":
        return build_report(submission, form_host=settings.form_host)

    labels: dict[str, str] = {}
    schema_client = get_schema_client()
    form_id = submission.get_text(FORM_ID_FIELD)
    if schema_client is not None and form_id.strip():
        labels = await schema_client.fetch_labels(form_id)
    else:
        logger.info(
            "form_schema_lookup_skipped",
            extra={
                "event": "form_schema_lookup_skipped",
                "has_client": schema_client is not None,
                "has_form_id": bool(form_id.strip()),
            },
        )
    return build_raw_answer_report(submission, labels, form_host=settings.form_host)
