from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from formrelay.answers.models import Report
from formrelay.config import settings
from formrelay.main import app
from formrelay.notifications import SinkError


class RecordingSink:
    def __init__(self, name: str, fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.reports: list[Report] = []

    async def send(self, report: Report) -> None:
        self.reports.append(report)
        if self.fail:
            raise SinkError(f"{self.name} rejected report")


class FakeSchemaClient:
    def __init__(self, labels: dict[str, str]) -> None:
        self.labels = labels
        self.form_ids: list[str] = []

    async def fetch_labels(self, form_id: str) -> dict[str, str]:
        self.form_ids.append(form_id)
        return self.labels


@pytest.fixture()
def sinks(monkeypatch: pytest.MonkeyPatch) -> list[RecordingSink]:
    recorded = [RecordingSink("slack"), RecordingSink("jira")]
    monkeypatch.setattr("formrelay.main.get_sinks", lambda: recorded)
    monkeypatch.setattr("formrelay.main.get_schema_client", lambda: None)
    monkeypatch.setattr(settings, "form_host", "formhost.com")
    monkeypatch.setattr(settings, "answer_source", "pretty")
    return recorded


def test_report_endpoint_relays_parsed_answers(sinks: list[RecordingSink]) -> None:
    with TestClient(app) as client:
        response = client.post(
            "/api/report",
            data={
                "formTitle": "Contact Form",
                "pretty": "Name: Jane Doe, Email: jane@x.com, Files: https://www.formhost.com/uploads/u1/photo.jpg",
            },
        )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["formTitle"] == "Contact Form"
    assert body["pretty"][-1] == {
        "label": "Attachment 1",
        "value": "https://files.formhost.com/jufs/u1/photo.jpg",
    }
    assert [pair["label"] for pair in body["pretty"]] == ["Name", "Email", "Files", "Attachment 1"]
    for sink in sinks:
        assert len(sink.reports) == 1
        assert sink.reports[0].title == "Contact Form"


def test_report_endpoint_reads_uploaded_pretty_field(sinks: list[RecordingSink]) -> None:
    with TestClient(app) as client:
        response = client.post(
            "/api/report",
            data={"FormTitle": "Upload Form"},
            files={"Pretty": ("pretty.txt", b"pretty: Status: Open, Owner: Sam", "text/plain")},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["formTitle"] == "Upload Form"
    assert body["pretty"] == [{"label": "Status", "value": "Open"}, {"label": "Owner", "value": "Sam"}]


def test_report_endpoint_succeeds_when_a_sink_fails(monkeypatch: pytest.MonkeyPatch, sinks: list[RecordingSink]) -> None:
    failing = RecordingSink("slack", fail=True)
    healthy = RecordingSink("jira")
    monkeypatch.setattr("formrelay.main.get_sinks", lambda: [failing, healthy])

    with TestClient(app) as client:
        response = client.post("/api/report", data={"formTitle": "Contact", "pretty": "Name: Jane"})

    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert len(healthy.reports) == 1


def test_report_endpoint_accepts_empty_submission(sinks: list[RecordingSink]) -> None:
    with TestClient(app) as client:
        response = client.post("/api/report", data={})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "formTitle": "", "pretty": []}


def test_report_endpoint_uses_raw_answers_with_schema_labels(
    monkeypatch: pytest.MonkeyPatch, sinks: list[RecordingSink]
) -> None:
    schema_client = FakeSchemaClient({"q3_name": "Full Name"})
    monkeypatch.setattr("formrelay.main.get_schema_client", lambda: schema_client)

    raw_request = json.dumps({"q3_name": {"first": "Jane", "last": "Doe"}, "q4_email": "jane@x.com"})
    with TestClient(app) as client:
        response = client.post(
            "/api/report",
            data={"formTitle": "Support", "formID": "2401", "rawRequest": raw_request},
        )

    assert response.status_code == 200
    assert response.json()["pretty"] == [
        {"label": "Full Name", "value": "Jane Doe"},
        {"label": "q4_email", "value": "jane@x.com"},
    ]
    assert schema_client.form_ids == ["2401"]


def test_report_endpoint_returns_fixed_error_on_unexpected_failure(
    monkeypatch: pytest.MonkeyPatch, sinks: list[RecordingSink]
) -> None:
    def explode(*args, **kwargs):
        raise RuntimeError("parser crashed")

    monkeypatch.setattr("formrelay.api.services.reporting.build_report", explode)

    with TestClient(app) as client:
        response = client.post("/api/report", data={"formTitle": "Contact", "pretty": "Name: Jane"})

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Could not parse form data or send to Slack"}
    assert all(not sink.reports for sink in sinks)
