from practice_engine.grader import grade, resolve_choice_answer
from practice_engine.schemas import (
    GapItem,
    HeadingItem,
    MatchingItem,
    McqItem,
    SpeakingItem,
    TrueFalseItem,
    YesNoNotGivenItem,
)

CITIES = ["Paris", "London", "Rome", "Berlin"]


class TestChoiceItems:
    """Multiple choice and heading items."""

    def test_letter_answer_accepts_option_text(self):
        item = McqItem(options=CITIES, answers=["b"])
        assert grade(item, "London").correct is True

    def test_letter_answer_accepts_letter_payload(self):
        item = McqItem(options=CITIES, answers=["b"])
        assert grade(item, "b").correct is True
        assert grade(item, "B").correct is True

    def test_text_answer_accepts_letter_payload(self):
        item = McqItem(options=CITIES, answers=["London"])
        assert grade(item, "b").correct is True

    def test_uppercase_letter_answer(self):
        item = McqItem(options=CITIES, answers=["C"])
        assert grade(item, "rome").correct is True
        assert grade(item, "Paris").correct is False

    def test_payload_normalized(self):
        item = McqItem(options=CITIES, answers=["London"])
        assert grade(item, "  london. ").correct is True

    def test_expected_lists_option_text(self):
        item = McqItem(options=CITIES, answers=["b", "Rome"])
        assert grade(item, "Paris").expected == ["London", "Rome"]

    def test_letter_outside_options_is_literal(self):
        item = McqItem(options=["yes", "no"], answers=["d"])
        assert resolve_choice_answer("d", item.options) == "d"
        assert grade(item, "d").correct is True
        assert grade(item, "no").correct is False

    def test_heading_same_rules(self):
        item = HeadingItem(options=["i. Origins", "ii. Decline"], answers=["A"])
        assert grade(item, "i Origins").correct is True

    def test_missing_payload_incorrect(self):
        item = McqItem(options=CITIES, answers=["b"])
        assert grade(item, None).correct is False
        assert grade(item, ["London"]).correct is False

    def test_no_answers_never_correct(self):
        assert grade(McqItem(options=CITIES), "London").correct is False


class TestPolarityItems:
    def test_true_false(self):
        item = TrueFalseItem(answer_bool="true")
        assert grade(item, "TRUE").correct is True
        assert grade(item, True).correct is True
        assert grade(item, "false").correct is False

    def test_not_given(self):
        item = YesNoNotGivenItem(answer_bool="not_given")
        assert grade(item, "Not_Given").correct is True
        assert grade(item, "no").correct is False
        assert grade(item, "x").expected == ["not_given"]

    def test_missing_key_or_payload(self):
        assert grade(TrueFalseItem(), "true").correct is False
        assert grade(TrueFalseItem(answer_bool="false"), None).correct is False


class TestGapItems:
    def test_strict_rejects_containment(self):
        item = GapItem(answers=["seven"], strict=True)
        assert grade(item, "about seven").correct is False
        assert grade(item, "Seven.").correct is True

    def test_lenient_accepts_containment(self):
        item = GapItem(answers=["seven"], strict=False)
        assert grade(item, "about seven").correct is True

    def test_lenient_accepts_shorter_payload(self):
        item = GapItem(answers=["the city library"])
        assert grade(item, "city library").correct is True

    def test_lenient_rejects_unrelated(self):
        item = GapItem(answers=["blue"])
        assert grade(item, "green").correct is False

    def test_empty_payload_never_matches(self):
        item = GapItem(answers=["blue"])
        assert grade(item, "  ").correct is False

    def test_any_of_several_answers(self):
        item = GapItem(answers=["7", "seven"], strict=True)
        assert grade(item, "7").correct is True
        assert grade(item, "seven").correct is True
        assert grade(item, "eight").correct is False


class TestMatchingItems:
    def _item(self):
        return MatchingItem(pairs=[{"left": "cat", "right": "mèo"}, {"left": "dog", "right": "chó"}])

    def test_order_independent(self):
        assert grade(self._item(), [["dog", "chó"], ["cat", "mèo"]]).correct is True

    def test_altered_pair(self):
        assert grade(self._item(), [["dog", "mèo"], ["cat", "chó"]]).correct is False

    def test_missing_pair(self):
        assert grade(self._item(), [["cat", "mèo"]]).correct is False

    def test_normalized_and_dict_pairs(self):
        payload = [{"left": "Cat!", "right": "Mèo"}, {"left": " dog", "right": "chó."}]
        assert grade(self._item(), payload).correct is True

    def test_malformed_payload(self):
        assert grade(self._item(), "cat=mèo").correct is False
        assert grade(self._item(), [["cat"]]).correct is False
        assert grade(self._item(), None).correct is False


class TestUngradedItems:
    def test_speaking_never_graded(self):
        result = grade(SpeakingItem(prompt="Talk"), "uploads/speaking/a.mp3")
        assert result.correct is None
        assert result.expected == []

    def test_unknown_type(self):
        class Essay:
            type = "essay"

        assert grade(Essay(), "text").correct is None
