from __future__ import annotations
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import PracticeSubmission
from .schemas import ProgressRow
from .submissions import canonical_user_id


def best_per_set(db: Session, user_id: str) -> List[ProgressRow]:
	"""Best attempt per set for one user, most recent best attempt first."""
	stmt = (
		select(PracticeSubmission)
		.where(PracticeSubmission.user_id == canonical_user_id(user_id))
		# Highest score first; on a tie the earliest attempt keeps the title
		.order_by(PracticeSubmission.score.desc(), PracticeSubmission.created_at.asc())
	)
	best: Dict[str, PracticeSubmission] = {}
	attempts: Dict[str, int] = {}
	for sub in db.scalars(stmt):
		attempts[sub.set_id] = attempts.get(sub.set_id, 0) + 1
		best.setdefault(sub.set_id, sub)

	rows = [
		ProgressRow(
			set_id=set_id,
			best_score=sub.score,
			total=sub.total,
			attempts=attempts[set_id],
			last_attempt_at=sub.created_at,
		)
		for set_id, sub in best.items()
	]
	rows.sort(key=lambda r: r.last_attempt_at, reverse=True)
	return rows


def leaderboard(db: Session, set_id: str, limit: int, max_limit: Optional[int] = None) -> List[PracticeSubmission]:
	limit = max(1, int(limit))
	if max_limit is not None:
		limit = min(limit, max_limit)
	stmt = (
		select(PracticeSubmission)
		.where(PracticeSubmission.set_id == set_id)
		.order_by(
			PracticeSubmission.score.desc(),
			# Faster wins a tie; attempts without a duration go last
			PracticeSubmission.duration_sec.is_(None),
			PracticeSubmission.duration_sec.asc(),
			PracticeSubmission.created_at.asc(),
		)
		.limit(limit)
	)
	return list(db.scalars(stmt))
