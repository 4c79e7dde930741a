"""
Answer grading for practice items.

This module maps (item, submitted payload) to a GradeResult. It handles:
- Multiple choice and matching-headings items, whose correct answers may be
  authored either as option letters or as literal option text
- True/False and Yes/No/Not Given items
- Gap fill items, in strict or containment-tolerant mode
- Matching items, compared as an unordered set of normalized pairs
- Speaking items, which are never machine-graded

Grading never raises for a malformed payload. A missing or wrong-shaped
answer is simply incorrect, so one bad answer cannot abort a whole
submission.
"""

from __future__ import annotations
import string
from typing import Any, Callable, Dict, List, Optional, Set

from .normalizer import normalize
from .schemas import (
	GapItem,
	GradeResult,
	HeadingItem,
	ItemSpec,
	MatchingItem,
	McqItem,
	SpeakingItem,
	TrueFalseItem,
	YesNoNotGivenItem,
)


# ============================================================================
# OPTION LETTER RESOLUTION
# ============================================================================

def resolve_choice_answer(answer: str, options: List[str]) -> str:
	"""
	Resolve a choice answer to the option text it stands for.

	Authors record correct answers either as an option letter ("B") or as the
	option text itself ("London"), and learners may submit either form. A
	single letter whose 0-based position falls inside ``options`` is replaced
	by that option; anything else is returned unchanged and compared as
	literal text.

	Args:
		answer: Raw authored or submitted answer
		options: Option texts of the item, in display order

	Returns:
		The option text for a letter answer, otherwise ``answer`` itself
	"""
	letter = normalize(answer)
	if len(letter) == 1 and letter in string.ascii_lowercase:
		index = ord(letter) - ord("a")
		if index < len(options):
			return options[index]
	return answer


def acceptable_choices(item: McqItem | HeadingItem) -> List[str]:
	return [resolve_choice_answer(a, item.options) for a in item.answers]


# ============================================================================
# PER-TYPE RULES
# ============================================================================

def _as_text(payload: Any) -> Optional[str]:
	if payload is None or isinstance(payload, (dict, list, tuple)):
		return None
	return str(payload)


def _grade_choice(item: McqItem | HeadingItem, payload: Any) -> GradeResult:
	expected = acceptable_choices(item)
	text = _as_text(payload)
	if text is None:
		return GradeResult(correct=False, expected=expected)
	accepted = {normalize(a) for a in expected}
	given = normalize(resolve_choice_answer(text, item.options))
	return GradeResult(correct=given in accepted, expected=expected)


def _grade_polarity(item: TrueFalseItem | YesNoNotGivenItem, payload: Any) -> GradeResult:
	answer = (item.answer_bool or "").lower()
	expected = [item.answer_bool] if item.answer_bool else []
	text = _as_text(payload)
	if text is None or not answer:
		return GradeResult(correct=False, expected=expected)
	return GradeResult(correct=text.strip().lower() == answer, expected=expected)


def _grade_gap(item: GapItem, payload: Any) -> GradeResult:
	expected = list(item.answers)
	text = _as_text(payload)
	if text is None:
		return GradeResult(correct=False, expected=expected)
	given = normalize(text)
	for answer in expected:
		target = normalize(answer)
		if given == target:
			return GradeResult(correct=True, expected=expected)
		# Empty strings would "contain" each other trivially
		if not item.strict and given and target and (target in given or given in target):
			return GradeResult(correct=True, expected=expected)
	return GradeResult(correct=False, expected=expected)


def _pair_key(left: Any, right: Any) -> str:
	return f"{normalize(str(left))}::{normalize(str(right))}"


def _submitted_pairs(payload: Any) -> Optional[Set[str]]:
	if not isinstance(payload, (list, tuple)):
		return None
	keys: Set[str] = set()
	for pair in payload:
		if isinstance(pair, dict):
			if "left" not in pair or "right" not in pair:
				return None
			keys.add(_pair_key(pair["left"], pair["right"]))
		elif isinstance(pair, (list, tuple)) and len(pair) == 2:
			keys.add(_pair_key(pair[0], pair[1]))
		else:
			return None
	return keys


def _grade_matching(item: MatchingItem, payload: Any) -> GradeResult:
	expected_keys = {_pair_key(p.left, p.right) for p in item.pairs}
	expected = [f"{p.left}::{p.right}" for p in item.pairs]
	submitted = _submitted_pairs(payload)
	if submitted is None:
		return GradeResult(correct=False, expected=expected)
	return GradeResult(correct=submitted == expected_keys, expected=expected)


def _grade_speaking(item: SpeakingItem, payload: Any) -> GradeResult:
	return GradeResult(correct=None, expected=[])


_RULES: Dict[str, Callable[[Any, Any], GradeResult]] = {
	"mcq": _grade_choice,
	"heading": _grade_choice,
	"truefalse": _grade_polarity,
	"yesno_ng": _grade_polarity,
	"gap": _grade_gap,
	"matching": _grade_matching,
	"speaking": _grade_speaking,
}


def grade(item: ItemSpec, payload: Any) -> GradeResult:
	"""
	Grade one submitted payload against its catalog item.

	Args:
		item: The item variant the answer refers to
		payload: Whatever the learner submitted (string for most types, a
			list of [left, right] pairs for matching)

	Returns:
		GradeResult with ``correct`` True/False for objective types and None
		for types that are never machine-graded, plus the expected answers
		to show the learner
	"""
	rule = _RULES.get(getattr(item, "type", None))
	if rule is None:
		return GradeResult(correct=None, expected=[])
	return rule(item, payload)

