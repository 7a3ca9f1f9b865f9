from __future__ import annotations

import re

from formrelay.answers.models import AnswerPair


ESCAPE_PATTERN = re.compile(r'\\([/"n])')
_ESCAPE_REPLACEMENTS = {"/": "/", '"': '"', "n": "\n"}

PRETTY_PREFIX_PATTERN = re.compile(r"^\s*pretty\b[:\s-]*", flags=re.IGNORECASE)

LABEL_LOOKAHEAD_CHARS = 200
# A label delimiter is a colon followed by whitespace or the end of the
# segment, so times (10:30) and URL schemes (https://) never split.
DELIMITER_PATTERN = re.compile(r":(?=\s|$)")
FALLBACK_COLON_PATTERN = re.compile(r":(?!//)")
LABEL_BOUNDARY_PATTERN = re.compile(
    r",\s+(?=[A-Z][^,\n]{0," + str(LABEL_LOOKAHEAD_CHARS) + r"}?:(?!//))"
)


def unescape(text: str) -> str:
    """Undo JSON-string escaping of `/`, `"` and newlines.

    Replacement runs until the text is stable, which keeps the operation
    idempotent for double-escaped input such as `\\\\/`.
    """
    previous = None
    current = text
    while current != previous:
        previous = current
        current = ESCAPE_PATTERN.sub(lambda match: _ESCAPE_REPLACEMENTS[match.group(1)], current)
    return current


def strip_pretty_prefix(text: str) -> str:
    return PRETTY_PREFIX_PATTERN.sub("", text.strip(), count=1)


def split_segments(text: str) -> list[str]:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    if "\n" in normalized:
        candidates = normalized.split("\n")
    else:
        candidates = LABEL_BOUNDARY_PATTERN.split(normalized)
    return [segment.strip() for segment in candidates if segment.strip()]


def split_label_value(segment: str) -> AnswerPair:
    delimiters = list(DELIMITER_PATTERN.finditer(segment))
    if delimiters:
        position = delimiters[-1].start()
    else:
        fallback = FALLBACK_COLON_PATTERN.search(segment)
        if fallback is None:
            return AnswerPair(label=segment.strip(), value="")
        position = fallback.start()
    return AnswerPair(label=segment[:position].strip(), value=segment[position + 1 :].strip())


def segment_answers(text: str | None) -> list[AnswerPair]:
    if not text:
        return []
    body = strip_pretty_prefix(unescape(text))
    pairs: list[AnswerPair] = []
    for segment in split_segments(body):
        pair = split_label_value(segment)
        if not pair.label and not pair.value:
            continue
        pairs.append(pair)
    return pairs
