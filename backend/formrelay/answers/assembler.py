from __future__ import annotations

import json
import re
from typing import Mapping

from formrelay.answers.attachments import is_file_attachment
from formrelay.answers.models import AnswerPair, Report, Submission
from formrelay.answers.text import segment_answers, unescape
from formrelay.answers.urls import DEFAULT_FORM_HOST, dedupe_urls, extract_urls


TITLE_FIELD = "formTitle"
PRETTY_FIELD = "pretty"
RAW_ANSWERS_FIELD = "rawRequest"
ANSWER_KEY_PATTERN = re.compile(r"^q(\d+)(?:_|$)", flags=re.IGNORECASE)


def collect_attachments(values: object, form_host: str = DEFAULT_FORM_HOST) -> list[AnswerPair]:
    urls = [url for url in dedupe_urls(extract_urls(values), form_host) if is_file_attachment(url, form_host)]
    return [AnswerPair(label=f"Attachment {index}", value=url) for index, url in enumerate(urls, start=1)]


def _assemble(title: str, answers: list[AnswerPair], attachments: list[AnswerPair]) -> Report:
    return Report(title=title.strip(), answers=tuple(answers + attachments))


def build_report(submission: Submission, form_host: str = DEFAULT_FORM_HOST) -> Report:
    title = submission.get_text(TITLE_FIELD)
    answers = segment_answers(submission.get_text(PRETTY_FIELD))
    attachments = collect_attachments(list(submission.fields.values()), form_host)
    return _assemble(title, answers, attachments)


def resolve_label(key: str, labels: Mapping[str, str]) -> str:
    if key in labels:
        return labels[key]
    match = ANSWER_KEY_PATTERN.match(key)
    if match:
        short_key = f"q{match.group(1)}"
        if short_key in labels:
            return labels[short_key]
    return key


def render_answer_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return unescape(value).strip()
    if isinstance(value, Mapping):
        parts = [render_answer_value(item) for item in value.values()]
        return " ".join(part for part in parts if part)
    if isinstance(value, (list, tuple)):
        parts = [render_answer_value(item) for item in value]
        return ", ".join(part for part in parts if part)
    return str(value)


def parse_raw_answers(raw: object) -> dict[str, object]:
    """Decode the raw answer map; anything unparseable yields an empty map."""
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        try:
            decoded = json.loads(unescape(raw))
        except ValueError:
            return {}
    return dict(decoded) if isinstance(decoded, Mapping) else {}


def build_raw_answer_report(
    submission: Submission,
    labels: Mapping[str, str] | None = None,
    form_host: str = DEFAULT_FORM_HOST,
) -> Report:
    labels = labels or {}
    raw_answers = parse_raw_answers(submission.get(RAW_ANSWERS_FIELD))

    answers: list[AnswerPair] = []
    for key, value in raw_answers.items():
        if not ANSWER_KEY_PATTERN.match(str(key)):
            continue
        rendered = render_answer_value(value)
        if not rendered:
            continue
        answers.append(AnswerPair(label=resolve_label(str(key), labels), value=rendered))

    attachments = collect_attachments(list(submission.fields.values()), form_host)
    return _assemble(submission.get_text(TITLE_FIELD), answers, attachments)
