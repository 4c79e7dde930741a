from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Float, Boolean, Text, JSON, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from .db import Base


def new_id() -> str:
	return uuid.uuid4().hex


class PracticeSet(Base):
	__tablename__ = "practice_sets"
	id = Column(String(32), primary_key=True, default=new_id)
	exam_type = Column(String(32), nullable=False, index=True)
	title = Column(String(256), nullable=False)
	# draft -> review -> published; only read paths look at it
	status = Column(String(16), default="draft", nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	sections = relationship(
		"PracticeSection",
		back_populates="practice_set",
		order_by="PracticeSection.order",
		cascade="all, delete-orphan",
	)


class PracticeSection(Base):
	__tablename__ = "practice_sections"
	__table_args__ = (UniqueConstraint("set_id", "skill", name="uq_section_set_skill"),)
	id = Column(String(32), primary_key=True, default=new_id)
	set_id = Column(String(32), ForeignKey("practice_sets.id"), nullable=False, index=True)
	skill = Column(String(16), nullable=False)
	order = Column(Integer, nullable=False)
	title = Column(String(256), nullable=False)

	# Presentation config, handed to clients verbatim
	audio_url = Column(Text, nullable=True)
	transcript = Column(Text, nullable=True)
	transcript_mode = Column(String(16), default="afterFirstEnd", nullable=False)
	max_replay = Column(Integer, default=2, nullable=False)
	timestamps = Column(JSON, nullable=True)  # [{start, end, text}]

	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	practice_set = relationship("PracticeSet", back_populates="sections")
	items = relationship(
		"PracticeItem",
		back_populates="section",
		order_by="PracticeItem.order",
		cascade="all, delete-orphan",
	)


class PracticeItem(Base):
	__tablename__ = "practice_items"
	__table_args__ = (UniqueConstraint("section_id", "order", name="uq_item_section_order"),)
	id = Column(String(32), primary_key=True, default=new_id)
	section_id = Column(String(32), ForeignKey("practice_sections.id"), nullable=False, index=True)
	order = Column(Integer, nullable=False)
	type = Column(String(16), nullable=False)
	prompt = Column(Text, nullable=False)
	explanation = Column(Text, nullable=True)
	snippet = Column(Text, nullable=True)

	# Type-dependent payload; unused columns stay empty
	options = Column(JSON, nullable=True)  # mcq / heading
	answers = Column(JSON, nullable=True)  # mcq / heading / gap
	answer_bool = Column(String(16), nullable=True)  # truefalse / yesno_ng
	polarity = Column(String(4), nullable=True)  # tf / yn
	strict = Column(Boolean, default=False, nullable=False)  # gap
	pairs = Column(JSON, nullable=True)  # matching: [{left, right}]

	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	section = relationship("PracticeSection", back_populates="items")


class PracticeSubmission(Base):
	__tablename__ = "practice_submissions"
	__table_args__ = (Index("ix_submission_user_set_section", "user_id", "set_id", "section_id", "created_at"),)
	id = Column(String(32), primary_key=True, default=new_id)
	user_id = Column(String(64), nullable=False, index=True)
	# Synthetic user id: the caller's id was missing or unusable
	anonymous = Column(Boolean, default=False, nullable=False)
	claimed_user_id = Column(String(256), nullable=True)

	exam_type = Column(String(32), nullable=False)
	skill = Column(String(16), nullable=False)  # listening/reading/writing/speaking or "mixed"
	# No foreign keys: submissions outlive catalog deletions
	set_id = Column(String(32), nullable=False, index=True)
	section_id = Column(String(32), nullable=True, index=True)  # null for whole-set submissions
	duration_sec = Column(Integer, nullable=True)

	answers = Column(JSON, nullable=False)  # list of graded answers
	score = Column(Integer, default=0, nullable=False)
	total = Column(Integer, default=0, nullable=False)
	analytics = Column(JSON, nullable=True)

	# Teacher grading overlay; the only part written after creation
	teacher_score = Column(Float, nullable=True)
	teacher_feedback = Column(Text, default="", nullable=False)
	graded_by_id = Column(String(64), nullable=True)
	graded_at = Column(DateTime, nullable=True)

	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
