from __future__ import annotations

import json
import re
from typing import Iterable, Mapping

from formrelay.answers.text import unescape


DEFAULT_FORM_HOST = "jotform.com"

URL_PATTERN = re.compile(r"https?://[^\s\"'<>]+", flags=re.IGNORECASE)
TRAILING_ARTIFACTS = "\"'<>\\,;.) \t\r\n"


def _upload_pattern(form_host: str) -> re.Pattern[str]:
    return re.compile(
        r"^(https?)://(?:www\.)?" + re.escape(form_host) + r"/uploads/(.*)$",
        flags=re.IGNORECASE,
    )


def extract_urls(value: object) -> list[str]:
    """Collect every http(s) URL embedded anywhere in `value`.

    Strings that look like JSON documents are parsed and walked; anything that
    fails to parse is scanned as plain text after unescaping.
    """
    found: list[str] = []
    _collect_urls(value, found)
    return found


def _collect_urls(value: object, found: list[str]) -> None:
    if value is None:
        return

    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith(("{", "[")):
            try:
                parsed = json.loads(stripped)
            except ValueError:
                parsed = None
            else:
                _collect_urls(parsed, found)
                return
        found.extend(URL_PATTERN.findall(unescape(value)))
        return

    if isinstance(value, Mapping):
        for item in value.values():
            _collect_urls(item, found)
        return

    if isinstance(value, (list, tuple)):
        for item in value:
            _collect_urls(item, found)


def normalize_url(url: str, form_host: str = DEFAULT_FORM_HOST) -> str:
    candidate = unescape(url).strip().rstrip(TRAILING_ARTIFACTS)
    match = _upload_pattern(form_host).match(candidate)
    if match:
        scheme, remainder = match.groups()
        candidate = f"{scheme}://files.{form_host}/jufs/{remainder}"
    return candidate


def dedupe_urls(urls: Iterable[str], form_host: str = DEFAULT_FORM_HOST) -> list[str]:
    seen: set[str] = set()
    deduped: list[str] = []
    for url in urls:
        canonical = normalize_url(url, form_host)
        if not canonical or canonical in seen:
            continue
        seen.add(canonical)
        deduped.append(canonical)
    return deduped
