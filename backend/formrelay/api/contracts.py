from pydantic import BaseModel, Field

from formrelay.answers.models import Report


REPORT_ERROR_MESSAGE = "Could not parse form data or send to Slack"


class ReportAnswer(BaseModel):
    label: str
    value: str = ""


class ReportResponse(BaseModel):
    ok: bool = True
    formTitle: str = ""
    pretty: list[ReportAnswer] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: Report) -> "ReportResponse":
        return cls(
            formTitle=report.title,
            pretty=[ReportAnswer(label=pair.label, value=pair.value) for pair in report.answers],
        )


class ReportErrorResponse(BaseModel):
    ok: bool = False
    error: str = REPORT_ERROR_MESSAGE
