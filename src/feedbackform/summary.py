from __future__ import annotations

import csv
import io
from typing import Any, Iterable

from feedbackform.answers import answer_to_text
from feedbackform.utils import to_iso

EXPORT_BASE_COLUMNS = ["Submitted At", "Response ID"]


def answer_key(raw: Any) -> str:
    # 複数選択は選択肢ごとに分解せず、値の組をそのままキーにする
    return answer_to_text(raw, separator=",")


def summarize(
    form: dict[str, Any], responses: Iterable[dict[str, Any]]
) -> dict[str, dict[str, Any]]:
    summary: dict[str, dict[str, Any]] = {}
    for question in form.get("questions", []):
        summary[question["id"]] = {
            "questionText": question["text"],
            "questionType": question["type"],
            "totalAnswers": 0,
            "answerCounts": {},
        }

    for response in responses:
        for answer in response.get("answers", []):
            stats = summary.get(answer.get("question_id"))
            if stats is None:
                continue
            key = answer_key(answer.get("answer"))
            stats["answerCounts"][key] = stats["answerCounts"].get(key, 0) + 1
            stats["totalAnswers"] += 1
    return summary


def export_column(question_text: str) -> str:
    # 固定列と同じ名前の質問は別名にして、回答IDや日時を上書きしない
    column = question_text
    while column in EXPORT_BASE_COLUMNS:
        column = f"{column} (question)"
    return column


def export_rows(
    responses: Iterable[dict[str, Any]],
) -> tuple[list[str], list[dict[str, str]]]:
    headers = list(EXPORT_BASE_COLUMNS)
    rows: list[dict[str, str]] = []
    for response in responses:
        row = {
            "Submitted At": to_iso(response["submitted_at"]),
            "Response ID": response["id"],
        }
        for answer in response.get("answers", []):
            column = export_column(answer["question_text"])
            if column not in headers:
                headers.append(column)
            row[column] = answer_to_text(answer.get("answer"))
        rows.append(row)
    return headers, rows


def render_csv(responses: Iterable[dict[str, Any]]) -> str:
    headers, rows = export_rows(responses)
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=headers, restval="")
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue()
