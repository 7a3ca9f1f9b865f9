from formrelay.answers.assembler import build_raw_answer_report, build_report, resolve_label
from formrelay.answers.attachments import is_file_attachment
from formrelay.answers.models import AnswerPair, Report, Submission
from formrelay.answers.text import segment_answers, unescape
from formrelay.answers.urls import DEFAULT_FORM_HOST, dedupe_urls, extract_urls, normalize_url

__all__ = [
    "AnswerPair",
    "DEFAULT_FORM_HOST",
    "Report",
    "Submission",
    "build_raw_answer_report",
    "build_report",
    "dedupe_urls",
    "extract_urls",
    "is_file_attachment",
    "normalize_url",
    "resolve_label",
    "segment_answers",
    "unescape",
]
