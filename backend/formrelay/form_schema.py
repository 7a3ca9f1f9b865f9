from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from formrelay.config import Settings


logger = logging.getLogger("formrelay.form_schema")


class FormSchemaError(RuntimeError):
    """Raised when the question schema cannot be fetched or decoded."""


def build_label_map(questions: Mapping[str, Any]) -> dict[str, str]:
    """Map raw answer keys to question labels.

    Each question is reachable as `q<order>_<name>`, `q<qid>_<name>` and
    `q<qid>`.
    """
    labels: dict[str, str] = {}
    for fallback_id, question in questions.items():
        if not isinstance(question, Mapping):
            continue
        text = str(question.get("text") or "").strip()
        if not text:
            continue
        qid = str(question.get("qid") or fallback_id).strip()
        name = str(question.get("name") or "").strip()
        order = str(question.get("order") or "").strip()
        if name and order:
            labels.setdefault(f"q{order}_{name}", text)
        if name and qid:
            labels.setdefault(f"q{qid}_{name}", text)
        if qid:
            labels.setdefault(f"q{qid}", text)
    return labels


class FormSchemaClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "FormSchemaClient | None":
        if not settings.form_api_key.strip():
            return None
        return cls(
            base_url=settings.form_api_base_url,
            api_key=settings.form_api_key.strip(),
            timeout_seconds=settings.schema_timeout_seconds,
        )

    async def fetch_questions(self, form_id: str) -> dict[str, Any]:
        url = f"{self._base_url}/form/{form_id}/questions"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, params={"apiKey": self._api_key})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise FormSchemaError(f"Unable to fetch questions for form '{form_id}': {exc}") from exc

        content = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(content, dict):
            raise FormSchemaError("Invalid questions payload: missing 'content' object.")
        return content

    async def fetch_labels(self, form_id: str) -> dict[str, str]:
        """Label map for `form_id`; empty when the lookup fails."""
        if not form_id.strip():
            return {}
        try:
            questions = await self.fetch_questions(form_id.strip())
        except FormSchemaError as exc:
            logger.warning(
                "form_schema_lookup_failed",
                extra={"event": "form_schema_lookup_failed", "form_id": form_id, "error": str(exc)},
            )
            return {}
        labels = build_label_map(questions)
        logger.info(
            "form_schema_loaded",
            extra={"event": "form_schema_loaded", "form_id": form_id, "label_count": len(labels)},
        )
        return labels
