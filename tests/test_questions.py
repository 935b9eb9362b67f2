import pytest

from feedbackform.config import Settings, parse_auth_tokens
from feedbackform.errors import ValidationError
from feedbackform.questions import (
    FORM_CREATE_SCHEMA,
    format_path,
    normalize_questions,
    validate_shape,
)


def _questions(n=3):
    return [{"text": f"Q{i}", "type": "text"} for i in range(n)]


def test_format_path():
    assert format_path(["questions", 2, "options"]) == "questions[2].options"
    assert format_path([]) == ""


def test_validate_shape_reports_missing_title():
    with pytest.raises(ValidationError) as exc:
        validate_shape(FORM_CREATE_SCHEMA, {"questions": _questions()})
    assert exc.value.errors[0] == {"field": "title", "message": "Title is required"}


def test_validate_shape_rejects_non_object():
    with pytest.raises(ValidationError) as exc:
        validate_shape(FORM_CREATE_SCHEMA, ["not", "an", "object"])
    assert exc.value.field == "body"


def test_normalize_questions_defaults():
    questions = normalize_questions(
        [
            {"text": "  Why?  ", "type": "text", "options": ["ignored", "too"]},
            {"text": "Which", "type": "multiple-choice", "options": [" a ", "b", ""]},
            {"text": "Else", "type": "text", "required": False},
        ]
    )
    assert questions[0]["text"] == "Why?"
    assert questions[0]["options"] == []
    assert questions[0]["required"] is True
    assert questions[1]["options"] == ["a", "b"]
    assert questions[2]["required"] is False
    assert len({q["id"] for q in questions}) == 3


def test_normalize_questions_count_bounds():
    with pytest.raises(ValidationError):
        normalize_questions(_questions(2))
    with pytest.raises(ValidationError):
        normalize_questions(_questions(6))
    assert len(normalize_questions(_questions(5))) == 5


def test_normalize_questions_reuses_only_known_ids():
    existing = normalize_questions(_questions())
    raw = [dict(q) for q in existing]
    raw[1]["id"] = "forged"
    raw[2]["id"] = existing[0]["id"]
    result = normalize_questions(raw, existing=existing)
    assert result[0]["id"] == existing[0]["id"]
    assert result[1]["id"] not in {"forged", existing[1]["id"]}
    assert result[2]["id"] != existing[0]["id"]


def test_blank_question_text():
    raw = _questions()
    raw[2]["text"] = " "
    with pytest.raises(ValidationError) as exc:
        normalize_questions(raw)
    assert exc.value.field == "questions[2].text"


def test_parse_auth_tokens():
    assert parse_auth_tokens("t1:alice, t2:bob,broken,:x") == {"t1": "alice", "t2": "bob"}


def test_settings_fall_back_on_bad_ints(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("MAX_PAGE_LIMIT", "50")
    settings = Settings()
    assert settings.port == 8000
    assert settings.max_page_limit == 50


def test_duplicate_options_count_once():
    raw = _questions()
    raw[1] = {"text": "Pick", "type": "multiple-choice", "options": ["X", " X ", "X"]}
    with pytest.raises(ValidationError) as exc:
        normalize_questions(raw)
    assert exc.value.field == "questions[1].options"

    raw[1]["options"] = ["X", "Y", "X"]
    assert normalize_questions(raw)[1]["options"] == ["X", "Y"]


def test_default_page_limit_clamped_to_max(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_LIMIT", "50")
    monkeypatch.setenv("MAX_PAGE_LIMIT", "20")
    settings = Settings()
    assert settings.default_page_limit == 20
    assert settings.max_page_limit == 20
