from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .models import PracticeSubmission
from .submissions import get_submission


logger = logging.getLogger(__name__)


def grade_submission(
	db: Session,
	submission_id: str,
	teacher_score: float,
	teacher_feedback: Optional[str],
	grader_id: Optional[str],
) -> PracticeSubmission:
	"""
	Attach (or replace) the human grade on a submission.

	Only the overlay fields change; answers, score, total and analytics keep
	the values the auto-grader produced. Concurrent graders: last write wins.
	"""
	submission = get_submission(db, submission_id)
	submission.teacher_score = float(teacher_score)
	submission.teacher_feedback = teacher_feedback or ""
	submission.graded_by_id = grader_id
	submission.graded_at = datetime.utcnow()
	db.commit()
	db.refresh(submission)
	logger.info("submission %s graded by %s: %s", submission.id, grader_id, submission.teacher_score)
	return submission
