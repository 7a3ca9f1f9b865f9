from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class AnswerPair:
    label: str
    value: str

    def as_dict(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class Report:
    title: str = ""
    answers: tuple[AnswerPair, ...] = ()

    @property
    def first_value(self) -> str:
        if not self.answers:
            return ""
        return self.answers[0].value


@dataclass(frozen=True)
class Submission:
    """Resolved form fields of one webhook delivery.

    Values are plain text or JSON-like structures. Lookups tolerate the case
    variants the form service sends (`formTitle` / `FormTitle`).
    """

    fields: Mapping[str, object] = field(default_factory=dict)

    def get(self, name: str, default: object = None) -> object:
        if name in self.fields:
            return self.fields[name]
        capitalized = name[:1].upper() + name[1:]
        if capitalized in self.fields:
            return self.fields[capitalized]
        folded = name.casefold()
        for key, value in self.fields.items():
            if str(key).casefold() == folded:
                return value
        return default

    def get_text(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            return ""
        return str(value)
