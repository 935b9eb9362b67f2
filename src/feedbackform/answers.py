"""Answer values as submitted by respondents.

A submitted ``answer`` is either one string or a list of strings (a
multi-select). Request payloads are decoded into :class:`Single` or
:class:`Multi` right after shape validation; the stored document keeps the
plain JSON form produced by :func:`encode_answer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Single:
    value: str

    def values(self) -> tuple[str, ...]:
        return (self.value,)

    def is_blank(self) -> bool:
        return not self.value.strip()


@dataclass(frozen=True)
class Multi:
    items: tuple[str, ...]

    def values(self) -> tuple[str, ...]:
        return self.items

    def is_blank(self) -> bool:
        return not self.items


AnswerValue = Union[Single, Multi]


def decode_answer(raw: Any) -> AnswerValue:
    if isinstance(raw, list):
        # 重複した選択肢は最初の出現だけ残す
        return Multi(tuple(dict.fromkeys(str(item) for item in raw)))
    return Single(str(raw))


def encode_answer(value: AnswerValue) -> str | list[str]:
    if isinstance(value, Multi):
        return list(value.items)
    return value.value


def answer_to_text(raw: Any, separator: str = ", ") -> str:
    if isinstance(raw, list):
        return separator.join(str(item) for item in raw)
    if raw is None:
        return ""
    return str(raw)
