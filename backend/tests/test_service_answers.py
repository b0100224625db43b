"""Tests for quiz answer parsing, mapping and prompt variables."""
import pytest

from photobooth.core.errors import ClientInputError
from photobooth.models.config import Question
from photobooth.services.answers import (
    UNKNOWN_ANSWER_LABEL,
    build_answer_variables,
    map_answers,
    parse_answers,
)


def _questions() -> list[Question]:
    return [
        Question(
            text=f"Question {i}",
            options=[
                {"label": f"L{i}-A", "value": "A"},
                {"label": f"L{i}-B", "value": "B"},
            ],
        )
        for i in range(1, 6)
    ]


class TestParseAnswers:
    def test_decodes_json_string(self) -> None:
        assert parse_answers('["A","B","A","B","A"]') == ["A", "B", "A", "B", "A"]

    def test_accepts_list(self) -> None:
        assert parse_answers(["A", "B", "C", "D", "A"]) == ["A", "B", "C", "D", "A"]

    def test_missing_answers_rejected(self) -> None:
        with pytest.raises(ClientInputError):
            parse_answers(None)
        with pytest.raises(ClientInputError):
            parse_answers("")

    def test_invalid_json_rejected(self) -> None:
        with pytest.raises(ClientInputError) as exc_info:
            parse_answers("[A, B")
        assert exc_info.value.message == "Format des réponses invalide"

    @pytest.mark.parametrize("raw", ['["A","B","C","D"]', '["A","B","C","D","A","B"]', '{"a": 1}', '"A"'])
    def test_wrong_shape_or_count_rejected(self, raw: str) -> None:
        with pytest.raises(ClientInputError) as exc_info:
            parse_answers(raw)
        assert exc_info.value.message == "5 réponses sont requises"


class TestMapAnswers:
    def test_maps_value_to_label(self) -> None:
        labels = map_answers(["A", "B", "A", "B", "A"], _questions())
        assert labels == ["L1-A", "L2-B", "L3-A", "L4-B", "L5-A"]

    def test_unknown_value_gets_placeholder(self) -> None:
        labels = map_answers(["A", "Z", "A", "A", "A"], _questions())
        assert labels[1] == UNKNOWN_ANSWER_LABEL
        assert labels[0] == "L1-A"

    def test_missing_question_gets_placeholder(self) -> None:
        labels = map_answers(["A", "A", "A", "A", "A"], _questions()[:3])
        assert labels[3:] == [UNKNOWN_ANSWER_LABEL, UNKNOWN_ANSWER_LABEL]

    def test_value_match_is_exact(self) -> None:
        labels = map_answers(["a", "A", "A", "A", "A"], _questions())
        assert labels[0] == UNKNOWN_ANSWER_LABEL


class TestBuildAnswerVariables:
    def test_each_label_has_its_own_key(self) -> None:
        variables = build_answer_variables(["L1", "L2", "L3", "L4", "L5"])
        assert variables["answer1"] == "L1"
        assert variables["answer4"] == "L4"
        assert variables["answer5"] == "L5"

    def test_joined_answers_variable(self) -> None:
        variables = build_answer_variables(["L1", "L2", "L3", "L4", "L5"])
        assert variables["answers"] == "L1; L2; L3; L4; L5"
