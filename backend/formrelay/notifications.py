from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Protocol

import httpx

from formrelay.answers.models import AnswerPair, Report
from formrelay.config import JiraConfig, Settings, SlackConfig


logger = logging.getLogger("formrelay.notifications")

FALLBACK_SUMMARY_VALUE = "New Request"
URL_VALUE_PATTERN = re.compile(r"^https?://\S+$", flags=re.IGNORECASE)


class SinkError(RuntimeError):
    """Raised when a downstream sink rejects or cannot receive a report."""


class ReportSink(Protocol):
    name: str

    async def send(self, report: Report) -> None:
        ...


def render_slack_text(report: Report) -> str:
    lines = [f"*{report.title}*"]
    lines.extend(f"• {pair.label}: {pair.value}" for pair in report.answers)
    return "\n".join(lines)


def build_issue_summary(report: Report) -> str:
    return f"{report.title}: {report.first_value or FALLBACK_SUMMARY_VALUE}"


def _value_node(value: str) -> dict[str, Any]:
    if URL_VALUE_PATTERN.match(value):
        return {
            "type": "text",
            "text": value,
            "marks": [{"type": "link", "attrs": {"href": value}}, {"type": "em"}],
        }
    return {"type": "text", "text": value}


def _answer_paragraph(pair: AnswerPair) -> dict[str, Any]:
    content: list[dict[str, Any]] = [{"type": "text", "text": f"{pair.label}: "}]
    if pair.value:
        content.append(_value_node(pair.value))
    return {"type": "paragraph", "content": content}


def build_issue_description(report: Report) -> dict[str, Any]:
    """Atlassian Document Format body with one paragraph per answer."""
    return {
        "type": "doc",
        "version": 1,
        "content": [_answer_paragraph(pair) for pair in report.answers],
    }


def build_issue_payload(report: Report, config: JiraConfig) -> dict[str, Any]:
    return {
        "fields": {
            "project": {"key": config.project_key},
            "summary": build_issue_summary(report),
            "description": build_issue_description(report),
            "issuetype": {"name": config.issue_type},
        }
    }


class SlackNotifier:
    name = "slack"

    def __init__(self, config: SlackConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    async def send(self, report: Report) -> None:
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self._config.webhook_url, json={"text": render_slack_text(report)})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SinkError(f"Slack webhook request failed: {exc}") from exc

        if not response.is_success:
            raise SinkError(f"Slack webhook failed with status {response.status_code}: {response.text[:500]}")


class JiraIssueCreator:
    name = "jira"

    def __init__(self, config: JiraConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._transport = transport

    async def send(self, report: Report) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
                auth=httpx.BasicAuth(self._config.email, self._config.api_token),
            ) as client:
                response = await client.post(
                    self._config.issue_url,
                    json=build_issue_payload(report, self._config),
                    headers={"Accept": "application/json"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SinkError(f"Jira issue request failed: {exc}") from exc

        if not response.is_success:
            raise SinkError(f"Jira issue creation failed with status {response.status_code}: {response.text[:500]}")

        try:
            payload = response.json()
        except ValueError:
            payload = None
        issue_key = payload.get("key") if isinstance(payload, dict) else None
        logger.info("jira_issue_created", extra={"event": "jira_issue_created", "issue_key": issue_key})


def build_sinks(settings: Settings) -> list[ReportSink]:
    sinks: list[ReportSink] = []

    slack_config = settings.slack_config()
    if slack_config is None:
        logger.warning("slack_sink_skipped", extra={"event": "sink_skipped", "sink": "slack", "reason": "missing_config"})
    else:
        sinks.append(SlackNotifier(slack_config))

    jira_config = settings.jira_config()
    if jira_config is None:
        logger.warning("jira_sink_skipped", extra={"event": "sink_skipped", "sink": "jira", "reason": "missing_config"})
    else:
        sinks.append(JiraIssueCreator(jira_config))

    return sinks


async def _deliver(sink: ReportSink, report: Report) -> bool:
    try:
        await sink.send(report)
    except SinkError as exc:
        logger.error("sink_delivery_failed", extra={"event": "sink_delivery_failed", "sink": sink.name, "error": str(exc)})
        return False
    except Exception:
        logger.exception("sink_delivery_crashed", extra={"event": "sink_delivery_failed", "sink": sink.name})
        return False
    logger.info("sink_delivered", extra={"event": "sink_delivered", "sink": sink.name})
    return True


async def relay_report(report: Report, sinks: list[ReportSink]) -> dict[str, bool]:
    """Send `report` to every sink concurrently; one failure never hides another."""
    if not sinks:
        return {}
    outcomes = await asyncio.gather(*(_deliver(sink, report) for sink in sinks))
    return {sink.name: delivered for sink, delivered in zip(sinks, outcomes)}
