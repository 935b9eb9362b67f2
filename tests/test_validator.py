import pytest

from feedbackform.answers import Multi, Single, decode_answer
from feedbackform.errors import ValidationError
from feedbackform.validator import decode_submission, validate_submission

FORM = {
    "id": "form-1",
    "questions": [
        {"id": "A", "text": "Your name", "type": "text", "options": [], "required": True},
        {"id": "B", "text": "Pick one", "type": "multiple-choice", "options": ["X", "Y"], "required": True},
        {"id": "C", "text": "Comments", "type": "text", "options": [], "required": False},
    ],
}


def _validate(raw):
    return validate_submission(FORM, decode_submission(raw))


def test_decode_answer_variants():
    assert decode_answer("X") == Single("X")
    assert decode_answer(["X", "Y", "X"]) == Multi(("X", "Y"))
    assert Single("  ").is_blank()
    assert Multi(()).is_blank()


def test_missing_required():
    with pytest.raises(ValidationError) as exc:
        _validate([{"questionId": "A", "answer": "hi"}])
    assert exc.value.reason == "missing_required"
    assert exc.value.details["missing"] == ["B"]


def test_blank_required_answer_counts_as_missing():
    with pytest.raises(ValidationError) as exc:
        _validate([{"questionId": "A", "answer": "  "}, {"questionId": "B", "answer": "X"}])
    assert exc.value.reason == "missing_required"
    assert exc.value.details["missing"] == ["A"]


def test_invalid_single_option():
    with pytest.raises(ValidationError) as exc:
        _validate([{"questionId": "A", "answer": "hi"}, {"questionId": "B", "answer": "Z"}])
    assert exc.value.reason == "invalid_option"
    assert exc.value.field == "answers[1].answer"
    assert "Z" in exc.value.message


def test_invalid_multi_option_names_offending_values():
    with pytest.raises(ValidationError) as exc:
        _validate([{"questionId": "A", "answer": "hi"}, {"questionId": "B", "answer": ["X", "P", "Q"]}])
    assert exc.value.details["invalid"] == ["P", "Q"]


def test_unknown_question():
    with pytest.raises(ValidationError) as exc:
        _validate([
            {"questionId": "A", "answer": "hi"},
            {"questionId": "B", "answer": "X"},
            {"questionId": "Z", "answer": "?"},
        ])
    assert exc.value.reason == "unknown_question"


def test_duplicate_answer():
    with pytest.raises(ValidationError) as exc:
        _validate([
            {"questionId": "A", "answer": "hi"},
            {"questionId": "B", "answer": "X"},
            {"questionId": "A", "answer": "again"},
        ])
    assert exc.value.reason == "duplicate_answer"


def test_success_keeps_submitted_order_and_snapshots_text():
    result = _validate([{"questionId": "B", "answer": "X"}, {"questionId": "A", "answer": "hi"}])
    assert result == [
        {"question_id": "B", "question_text": "Pick one", "answer": "X"},
        {"question_id": "A", "question_text": "Your name", "answer": "hi"},
    ]


def test_text_questions_accept_any_content():
    result = _validate([
        {"questionId": "A", "answer": "hi"},
        {"questionId": "B", "answer": ["Y"]},
        {"questionId": "C", "answer": ["free", "form"]},
    ])
    assert result[1]["answer"] == ["Y"]
    assert result[2]["answer"] == ["free", "form"]
