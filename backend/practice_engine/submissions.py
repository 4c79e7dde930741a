"""
Practice submission engine.

Grades a learner's answers for one section (or a whole set), computes the
attempt analytics and stores the result as a new, independent submission.
Submissions are append-only: resubmitting creates another record, and
"latest"/"best" are worked out when reading.
"""

from __future__ import annotations
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import catalog
from .analytics import aggregate, answered_total
from .errors import InvalidInput, NotFound
from .grader import grade
from .models import PracticeItem, PracticeSubmission
from .schemas import AnswerIn, GradedAnswer


logger = logging.getLogger(__name__)

ITEM_NOT_FOUND = "Item not found"


# ============================================================================
# IDENTITY
# ============================================================================

USER_ID_MAX_LENGTH = 64


def is_valid_user_id(value: Optional[str]) -> bool:
	if not value:
		return False
	try:
		uuid.UUID(str(value))
	except ValueError:
		return False
	return True


def canonical_user_id(value: Optional[str]) -> Optional[str]:
	"""
	The single stored spelling of a user id.

	Every textual form of one UUID (upper case, braces, bare hex) maps to the
	lowercase hyphenated form. Anything else, such as a token subject that is
	a username, is returned unchanged.
	"""
	if not value:
		return value
	try:
		return str(uuid.UUID(str(value)))
	except ValueError:
		return str(value)


def resolve_user_id(raw: Optional[str], verified: bool = False) -> Tuple[str, bool]:
	"""
	Return (user_id, anonymous) for a caller identifier.

	A ``verified`` id comes from a checked identity token and is accepted
	whatever its format. An unverified id from the request must be a UUID.
	Ids that are missing or unusable (demo sessions, offline test users) are
	replaced by a fresh synthetic id so the attempt can still be graded and
	stored.
	"""
	usable = is_valid_user_id(raw) or (verified and bool(raw) and len(str(raw)) <= USER_ID_MAX_LENGTH)
	if usable:
		return canonical_user_id(raw), False
	synthetic = str(uuid.uuid4())
	logger.warning("identity fallback: unusable user id %r replaced by synthetic id %s", raw, synthetic)
	return synthetic, True


def _claimed_id(raw: Optional[str], anonymous: bool) -> Optional[str]:
	# Kept for support lookups; truncated to the column width
	if not anonymous or not raw:
		return None
	return str(raw)[:256]


# ============================================================================
# GRADING PASS
# ============================================================================

def _coerce_answers(answers: Sequence[Any]) -> List[AnswerIn]:
	if not answers:
		raise InvalidInput("answers must not be empty")
	coerced: List[AnswerIn] = []
	for a in answers:
		try:
			answer = a if isinstance(a, AnswerIn) else AnswerIn.model_validate(a)
		except ValidationError as e:
			raise InvalidInput(f"malformed answer: {e.errors()[0]['msg']}")
		if not answer.item_id:
			raise InvalidInput("every answer needs an item_id")
		coerced.append(answer)
	return coerced


def _anomaly(answer: AnswerIn) -> GradedAnswer:
	logger.warning("grading anomaly: item %s is not in the catalog", answer.item_id)
	return GradedAnswer(
		item_id=answer.item_id,
		payload=answer.payload,
		correct=None,
		expected=[],
		explanation=ITEM_NOT_FOUND,
		type="unknown",
		time_spent_ms=answer.time_spent_ms,
		anomaly=True,
	)


def _grade_answer(answer: AnswerIn, item: PracticeItem, auto_grade: bool) -> GradedAnswer:
	correct = None
	expected: List[str] = []
	spec = catalog.item_spec(item)
	if spec is not None:
		result = grade(spec, answer.payload)
		expected = result.expected
		if auto_grade:
			correct = result.correct
	return GradedAnswer(
		item_id=answer.item_id,
		payload=answer.payload,
		correct=correct,
		expected=expected,
		explanation=item.explanation,
		type=item.type,
		time_spent_ms=answer.time_spent_ms,
	)


def grade_answers(
	answers: Iterable[AnswerIn],
	items: Dict[str, PracticeItem],
	auto_graded_skills: Iterable[str],
	*,
	skill_of: Callable[[PracticeItem], str],
) -> List[GradedAnswer]:
	"""Grade each answer in submission order; ``skill_of(item)`` picks the skill that decides auto-grading."""
	auto = set(auto_graded_skills)
	graded: List[GradedAnswer] = []
	for answer in answers:
		item = items.get(answer.item_id)
		if item is None:
			graded.append(_anomaly(answer))
		else:
			graded.append(_grade_answer(answer, item, skill_of(item) in auto))
	return graded


def _score(graded: List[GradedAnswer]) -> int:
	return sum(1 for a in graded if a.correct is True)


def _store(db: Session, submission: PracticeSubmission) -> PracticeSubmission:
	db.add(submission)
	db.commit()
	db.refresh(submission)
	logger.info(
		"submission %s stored: user=%s%s set=%s section=%s score=%s/%s",
		submission.id,
		submission.user_id,
		" (anonymous)" if submission.anonymous else "",
		submission.set_id,
		submission.section_id,
		submission.score,
		submission.total,
	)
	return submission


# ============================================================================
# SUBMIT
# ============================================================================

def submit_section(
	db: Session,
	section_id: str,
	user_id: Optional[str],
	answers: Sequence[Any],
	duration_sec: Optional[int] = None,
	*,
	auto_graded_skills: Iterable[str],
	verified_user: bool = False,
) -> PracticeSubmission:
	answers = _coerce_answers(answers)
	section = catalog.get_section(db, section_id)
	practice_set = catalog.get_set(db, section.set_id)
	resolved_user, anonymous = resolve_user_id(user_id, verified=verified_user)

	auto_graded_skills = list(auto_graded_skills)
	items = catalog.load_items(db, [a.item_id for a in answers], section_id=section.id)
	graded = grade_answers(answers, items, auto_graded_skills, skill_of=lambda item: section.skill)
	analytics = aggregate(graded, section.skill, auto_graded_skills)

	submission = PracticeSubmission(
		user_id=resolved_user,
		anonymous=anonymous,
		claimed_user_id=_claimed_id(user_id, anonymous),
		exam_type=practice_set.exam_type,
		skill=section.skill,
		set_id=practice_set.id,
		section_id=section.id,
		duration_sec=duration_sec,
		answers=[a.model_dump(mode="json") for a in graded],
		score=_score(graded),
		total=answered_total(graded),
		analytics=analytics.model_dump(mode="json"),
	)
	return _store(db, submission)


def submit_set(
	db: Session,
	set_id: str,
	user_id: Optional[str],
	answers: Sequence[Any],
	duration_sec: Optional[int] = None,
	*,
	auto_graded_skills: Iterable[str],
	verified_user: bool = False,
) -> PracticeSubmission:
	answers = _coerce_answers(answers)
	practice_set = catalog.get_set(db, set_id)
	resolved_user, anonymous = resolve_user_id(user_id, verified=verified_user)

	items = catalog.load_items(db, [a.item_id for a in answers], set_id=practice_set.id)
	# Each item is auto-graded according to the skill of its own section
	graded = grade_answers(answers, items, auto_graded_skills, skill_of=lambda item: item.section.skill)

	submission = PracticeSubmission(
		user_id=resolved_user,
		anonymous=anonymous,
		claimed_user_id=_claimed_id(user_id, anonymous),
		exam_type=practice_set.exam_type,
		skill="mixed",
		set_id=practice_set.id,
		section_id=None,
		duration_sec=duration_sec,
		answers=[a.model_dump(mode="json") for a in graded],
		score=_score(graded),
		total=answered_total(graded),
		analytics=None,
	)
	return _store(db, submission)


# ============================================================================
# READ / DELETE
# ============================================================================

def list_submissions(
	db: Session,
	*,
	section_id: Optional[str] = None,
	user_id: Optional[str] = None,
	skill: Optional[str] = None,
	set_id: Optional[str] = None,
) -> List[PracticeSubmission]:
	stmt = select(PracticeSubmission)
	if section_id:
		stmt = stmt.where(PracticeSubmission.section_id == section_id)
	if user_id:
		stmt = stmt.where(PracticeSubmission.user_id == canonical_user_id(user_id))
	if skill:
		stmt = stmt.where(PracticeSubmission.skill == skill)
	if set_id:
		stmt = stmt.where(PracticeSubmission.set_id == set_id)
	return list(db.scalars(stmt.order_by(PracticeSubmission.created_at.desc())))


def get_submission(db: Session, submission_id: str) -> PracticeSubmission:
	submission = db.get(PracticeSubmission, submission_id)
	if submission is None:
		raise NotFound("Submission not found")
	return submission


def latest_submission(db: Session, user_id: str, section_id: str) -> PracticeSubmission:
	if not user_id or not section_id:
		raise InvalidInput("user_id and section_id are required")
	stmt = (
		select(PracticeSubmission)
		.where(
			PracticeSubmission.user_id == canonical_user_id(user_id),
			PracticeSubmission.section_id == section_id,
		)
		.order_by(PracticeSubmission.created_at.desc())
		.limit(1)
	)
	submission = db.scalars(stmt).first()
	if submission is None:
		raise NotFound("No submission found")
	return submission


def delete_submission(db: Session, submission_id: str) -> None:
	submission = get_submission(db, submission_id)
	db.delete(submission)
	db.commit()
	logger.info("submission %s deleted", submission_id)
