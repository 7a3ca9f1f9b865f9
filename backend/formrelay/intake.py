from __future__ import annotations

from dataclasses import dataclass
import inspect
from typing import Any, Callable, Iterable, Union

from formrelay.answers.models import Submission


@dataclass(frozen=True)
class TextField:
    text: str


@dataclass(frozen=True)
class ReadableField:
    read: Callable[[], Any]


FieldValue = Union[TextField, ReadableField]


def _decode(content: object) -> str:
    if isinstance(content, bytes):
        for encoding in ("utf-8", "latin-1"):
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue
    return "" if content is None else str(content)


def classify_field(value: object) -> FieldValue:
    if isinstance(value, str):
        return TextField(text=value)
    if isinstance(value, bytes):
        return TextField(text=_decode(value))
    read = getattr(value, "read", None)
    if callable(read):
        return ReadableField(read=read)
    return TextField(text="" if value is None else str(value))


async def resolve_field_text(value: object) -> str:
    field = value if isinstance(value, (TextField, ReadableField)) else classify_field(value)
    if isinstance(field, TextField):
        return field.text
    content = field.read()
    if inspect.isawaitable(content):
        content = await content
    return _decode(content)


async def build_submission(items: Iterable[tuple[str, object]]) -> Submission:
    """Resolve raw form items (text or uploaded files) into a Submission.

    Repeated field names keep the first value, matching how the form service
    sends one value per field.
    """
    fields: dict[str, object] = {}
    for name, value in items:
        if name in fields:
            continue
        fields[name] = await resolve_field_text(value)
    return Submission(fields=fields)
