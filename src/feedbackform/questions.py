from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from feedbackform.config import MAX_QUESTIONS, MIN_OPTIONS, MIN_QUESTIONS, QUESTION_TYPES
from feedbackform.errors import ValidationError
from feedbackform.utils import new_ulid, to_iso

QUESTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["text", "type"],
    "properties": {
        "id": {"type": "string"},
        "_id": {"type": "string"},
        "text": {"type": "string"},
        "type": {"enum": sorted(QUESTION_TYPES)},
        "options": {"type": "array", "items": {"type": "string"}},
        "required": {"type": "boolean"},
    },
}

_QUESTIONS_PROPERTY: dict[str, Any] = {
    "type": "array",
    "minItems": MIN_QUESTIONS,
    "maxItems": MAX_QUESTIONS,
    "items": QUESTION_SCHEMA,
}

FORM_CREATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["title", "questions"],
    "properties": {
        "title": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "questions": _QUESTIONS_PROPERTY,
        "isActive": {"type": "boolean"},
    },
}

FORM_UPDATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "questions": _QUESTIONS_PROPERTY,
        "isActive": {"type": "boolean"},
    },
}

SUBMISSION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["answers"],
    "properties": {
        "answers": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["questionId", "answer"],
                "properties": {
                    "questionId": {"type": "string", "minLength": 1},
                    "answer": {
                        "anyOf": [
                            {"type": "string"},
                            {"type": "array", "items": {"type": "string"}},
                        ]
                    },
                },
            },
        }
    },
}

# JSON Schema のエラーを利用者向けの文言に置き換える
_MESSAGES: dict[tuple[str, str], str] = {
    ("title", "required"): "Title is required",
    ("title", "type"): "Title must be a string",
    ("questions", "required"): "Questions are required",
    ("questions", "minItems"): f"Must have between {MIN_QUESTIONS}-{MAX_QUESTIONS} questions",
    ("questions", "maxItems"): f"Must have between {MIN_QUESTIONS}-{MAX_QUESTIONS} questions",
    ("questions", "type"): f"Must have between {MIN_QUESTIONS}-{MAX_QUESTIONS} questions",
    ("text", "required"): "Question text is required",
    ("type", "required"): "Invalid question type",
    ("type", "enum"): "Invalid question type",
    ("answers", "required"): "Answers are required",
    ("answers", "minItems"): "Answers are required",
    ("answers", "type"): "Answers are required",
    ("questionId", "required"): "Invalid question ID",
    ("questionId", "type"): "Invalid question ID",
    ("questionId", "minLength"): "Invalid question ID",
    ("answer", "required"): "Answer is required",
    ("answer", "anyOf"): "Answer must be a string or a list of strings",
}


def format_path(path: list[Any]) -> str:
    result = ""
    for part in path:
        if isinstance(part, int):
            result += f"[{part}]"
        else:
            result += f".{part}" if result else str(part)
    return result


def validate_shape(schema: dict[str, Any], payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", field="body")
    validator = Draft7Validator(schema)
    found = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    if not found:
        return

    errors: list[dict[str, str]] = []
    for error in found:
        path = list(error.path)
        if error.validator == "required":
            missing = [key for key in error.validator_value if key not in error.instance]
            path.append(missing[0] if missing else "")
        leaf = path[-1] if path and isinstance(path[-1], str) else ""
        message = _MESSAGES.get((leaf, str(error.validator)), error.message)
        errors.append({"field": format_path(path), "message": message})
    raise ValidationError(errors[0]["message"], errors=errors, reason="invalid_shape")


def normalize_title(raw: Any) -> str:
    title = str(raw or "").strip()
    if not title:
        raise ValidationError("Title is required", field="title")
    return title


def normalize_questions(
    raw_questions: list[dict[str, Any]],
    existing: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """質問定義を検証し、保存用の形に揃える。

    既存フォームの質問IDを持つ質問はそのIDを引き継ぐ。それ以外は新しいIDを振る。
    """
    if not MIN_QUESTIONS <= len(raw_questions) <= MAX_QUESTIONS:
        raise ValidationError(
            f"Must have between {MIN_QUESTIONS}-{MAX_QUESTIONS} questions",
            field="questions",
        )

    known_ids = {q["id"] for q in existing or []}
    used_ids: set[str] = set()
    questions: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_questions):
        loc = f"questions[{index}]"
        text = str(raw.get("text", "")).strip()
        if not text:
            raise ValidationError("Question text is required", field=f"{loc}.text")
        question_type = raw.get("type")
        if question_type not in QUESTION_TYPES:
            raise ValidationError("Invalid question type", field=f"{loc}.type")

        options: list[str] = []
        if question_type == "multiple-choice":
            # 同じ選択肢は1つとして数える
            options = list(
                dict.fromkeys(
                    value.strip()
                    for value in (raw.get("options") or [])
                    if isinstance(value, str) and value.strip()
                )
            )
            if len(options) < MIN_OPTIONS:
                raise ValidationError(
                    f"Multiple choice questions must have at least {MIN_OPTIONS} options",
                    field=f"{loc}.options",
                )

        question_id = str(raw.get("id") or raw.get("_id") or "")
        if question_id not in known_ids or question_id in used_ids:
            question_id = new_ulid()
        used_ids.add(question_id)

        questions.append(
            {
                "id": question_id,
                "text": text,
                "type": question_type,
                "options": options,
                "required": bool(raw.get("required", True)),
            }
        )
    return questions


def question_output(question: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": question["id"],
        "text": question["text"],
        "type": question["type"],
        "options": list(question.get("options") or []),
        "required": bool(question.get("required", True)),
    }


def form_output(form: dict[str, Any], response_count: int | None = None) -> dict[str, Any]:
    output = {
        "id": form["id"],
        "title": form["title"],
        "description": form.get("description", ""),
        "questions": [question_output(q) for q in form.get("questions", [])],
        "createdBy": form["owner_id"],
        "isActive": bool(form.get("is_active", True)),
        "publicUrl": form["public_id"],
        "responses": list(form.get("response_ids", [])),
        "createdAt": to_iso(form["created_at"]),
        "updatedAt": to_iso(form["updated_at"]),
    }
    if response_count is not None:
        output["responseCount"] = response_count
    return output


def public_form_output(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "title": form["title"],
        "description": form.get("description", ""),
        "questions": [question_output(q) for q in form.get("questions", [])],
    }
