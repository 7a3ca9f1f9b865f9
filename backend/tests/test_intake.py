from __future__ import annotations

import asyncio

from formrelay.intake import ReadableField, TextField, build_submission, classify_field, resolve_field_text


class FakeUpload:
    def __init__(self, content: bytes) -> None:
        self._content = content

    async def read(self) -> bytes:
        return self._content


class SyncReader:
    def read(self) -> str:
        return "Name: Sync"


def test_classify_field_distinguishes_text_and_readables() -> None:
    assert classify_field("Name: Jane") == TextField(text="Name: Jane")
    assert classify_field(b"Name: Jane") == TextField(text="Name: Jane")
    assert isinstance(classify_field(FakeUpload(b"x")), ReadableField)
    assert classify_field(None) == TextField(text="")


def test_resolve_field_text_reads_async_and_sync_readables() -> None:
    assert asyncio.run(resolve_field_text(FakeUpload("Name: Zoë".encode("utf-8")))) == "Name: Zoë"
    assert asyncio.run(resolve_field_text(FakeUpload(b"caf\xe9"))) == "café"
    assert asyncio.run(resolve_field_text(SyncReader())) == "Name: Sync"
    assert asyncio.run(resolve_field_text(TextField(text="plain"))) == "plain"


def test_build_submission_keeps_first_value_per_field() -> None:
    submission = asyncio.run(
        build_submission(
            [
                ("formTitle", "Contact"),
                ("pretty", FakeUpload(b"Name: Jane")),
                ("formTitle", "Ignored"),
            ]
        )
    )

    assert submission.get("formTitle") == "Contact"
    assert submission.get_text("Pretty") == "Name: Jane"
    assert submission.get("missing", "fallback") == "fallback"
