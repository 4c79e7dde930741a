from __future__ import annotations
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import catalog, progress, submissions, teacher_grading
from ..db import get_db
from ..schemas import GradeSubmissionRequest, ProgressRow, SubmissionOut, SubmitRequest
from ..settings import settings
from .auth import User, get_optional_user


router = APIRouter(prefix="/practice", tags=["practice_submissions"])


def _caller(user: Optional[User], fallback: Optional[str]) -> Tuple[Optional[str], bool]:
	# (id, verified). A verified token wins over whatever id the body or query carries
	if user is not None:
		return user.user_id, True
	return fallback, False


# ---- Learner

@router.post("/sections/{section_id}/submit", response_model=SubmissionOut, status_code=201)
def submit_section(
	section_id: str,
	req: SubmitRequest,
	user: Optional[User] = Depends(get_optional_user),
	db: Session = Depends(get_db),
):
	caller, verified = _caller(user, req.user_id)
	return submissions.submit_section(
		db,
		section_id,
		caller,
		req.answers,
		req.duration_sec,
		auto_graded_skills=settings.auto_graded_skills,
		verified_user=verified,
	)


@router.post("/sets/{set_id}/submit", response_model=SubmissionOut, status_code=201)
def submit_set(
	set_id: str,
	req: SubmitRequest,
	user: Optional[User] = Depends(get_optional_user),
	db: Session = Depends(get_db),
):
	caller, verified = _caller(user, req.user_id)
	return submissions.submit_set(
		db,
		set_id,
		caller,
		req.answers,
		req.duration_sec,
		auto_graded_skills=settings.auto_graded_skills,
		verified_user=verified,
	)


@router.get("/progress/me", response_model=List[ProgressRow])
def get_progress(
	user_id: Optional[str] = None,
	user: Optional[User] = Depends(get_optional_user),
	db: Session = Depends(get_db),
):
	caller, _ = _caller(user, user_id)
	if not caller:
		raise HTTPException(status_code=401, detail="Unauthorized")
	return progress.best_per_set(db, caller)


@router.get("/sets/{set_id}/leaderboard", response_model=List[SubmissionOut])
def get_leaderboard(set_id: str, limit: Optional[int] = None, db: Session = Depends(get_db)):
	catalog.get_set(db, set_id)
	return progress.leaderboard(
		db,
		set_id,
		limit if limit is not None else settings.leaderboard_limit,
		max_limit=settings.leaderboard_max_limit,
	)


# ---- Teacher

@router.get("/submissions", response_model=List[SubmissionOut])
def list_submissions(
	section_id: Optional[str] = None,
	user_id: Optional[str] = None,
	skill: Optional[str] = None,
	set_id: Optional[str] = None,
	db: Session = Depends(get_db),
):
	return submissions.list_submissions(db, section_id=section_id, user_id=user_id, skill=skill, set_id=set_id)


# Declared before /submissions/{submission_id} so "latest" is not taken for an id
@router.get("/submissions/latest", response_model=SubmissionOut)
def get_latest_submission(user_id: str, section_id: str, db: Session = Depends(get_db)):
	return submissions.latest_submission(db, user_id, section_id)


@router.get("/submissions/{submission_id}", response_model=SubmissionOut)
def get_submission(submission_id: str, db: Session = Depends(get_db)):
	return submissions.get_submission(db, submission_id)


@router.delete("/submissions/{submission_id}")
def delete_submission(submission_id: str, db: Session = Depends(get_db)):
	submissions.delete_submission(db, submission_id)
	return {"message": "Submission deleted successfully", "ok": True}


@router.put("/submissions/{submission_id}/grade", response_model=SubmissionOut)
def grade_submission(
	submission_id: str,
	req: GradeSubmissionRequest,
	user: Optional[User] = Depends(get_optional_user),
	db: Session = Depends(get_db),
):
	grader, _ = _caller(user, req.grader_id)
	return teacher_grading.grade_submission(
		db,
		submission_id,
		req.teacher_score,
		req.teacher_feedback,
		grader,
	)
