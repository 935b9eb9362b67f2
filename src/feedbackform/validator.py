from __future__ import annotations

from typing import Any

from feedbackform.answers import AnswerValue, Multi, decode_answer, encode_answer
from feedbackform.errors import ValidationError


def decode_submission(raw_answers: list[dict[str, Any]]) -> list[tuple[str, AnswerValue]]:
    return [(str(item["questionId"]), decode_answer(item["answer"])) for item in raw_answers]


def validate_submission(
    form: dict[str, Any], answers: list[tuple[str, AnswerValue]]
) -> list[dict[str, Any]]:
    """Check submitted answers against the form's questions.

    Returns one ``{question_id, question_text, answer}`` record per submitted
    answer, in submitted order. ``question_text`` is a snapshot of the
    question's current text. Raises :class:`ValidationError` with ``reason``
    set to ``missing_required``, ``unknown_question``, ``duplicate_answer`` or
    ``invalid_option``.
    """
    questions = {q["id"]: q for q in form.get("questions", [])}

    answered = {qid for qid, value in answers if not value.is_blank()}
    missing = [
        q["id"]
        for q in form.get("questions", [])
        if q.get("required", True) and q["id"] not in answered
    ]
    if missing:
        raise ValidationError(
            "All required questions must be answered",
            field="answers",
            reason="missing_required",
            missing=missing,
        )

    seen: set[str] = set()
    normalized: list[dict[str, Any]] = []
    for index, (question_id, value) in enumerate(answers):
        loc = f"answers[{index}]"
        question = questions.get(question_id)
        if question is None:
            raise ValidationError(
                f"Invalid question ID: {question_id}",
                field=f"{loc}.questionId",
                reason="unknown_question",
            )
        if question_id in seen:
            raise ValidationError(
                f"Duplicate answer for question \"{question['text']}\"",
                field=f"{loc}.questionId",
                reason="duplicate_answer",
            )
        seen.add(question_id)

        if question["type"] == "multiple-choice":
            options = set(question.get("options") or [])
            invalid = [v for v in value.values() if v not in options]
            if invalid:
                label = "options" if isinstance(value, Multi) else "option"
                raise ValidationError(
                    f"Invalid {label} for question \"{question['text']}\": {', '.join(invalid)}",
                    field=f"{loc}.answer",
                    reason="invalid_option",
                    invalid=invalid,
                )

        normalized.append(
            {
                "question_id": question_id,
                "question_text": question["text"],
                "answer": encode_answer(value),
            }
        )
    return normalized
