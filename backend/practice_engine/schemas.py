from __future__ import annotations
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


SKILLS: List[str] = ["listening", "reading", "writing", "speaking"]
ITEM_TYPES: List[str] = ["mcq", "gap", "truefalse", "yesno_ng", "matching", "heading", "speaking"]
SET_STATUSES: List[str] = ["draft", "review", "published"]
TRANSCRIPT_MODES: List[str] = ["never", "afterFirstEnd", "always"]

Skill = Literal["listening", "reading", "writing", "speaking"]
SetStatus = Literal["draft", "review", "published"]


# ============================================================================
# ITEM VARIANTS
# ============================================================================
# Type-specific fields default to empty so defective authored content still
# loads; the grader turns it into an incorrect answer instead of an error.

class _ItemBase(BaseModel):
	prompt: str = ""
	explanation: Optional[str] = None


class McqItem(_ItemBase):
	type: Literal["mcq"] = "mcq"
	options: List[str] = Field(default_factory=list)
	# Option letters ("A".."D") or literal option text
	answers: List[str] = Field(default_factory=list)


class HeadingItem(_ItemBase):
	type: Literal["heading"] = "heading"
	options: List[str] = Field(default_factory=list)
	answers: List[str] = Field(default_factory=list)


class GapItem(_ItemBase):
	type: Literal["gap"] = "gap"
	answers: List[str] = Field(default_factory=list)
	strict: bool = False


class TrueFalseItem(_ItemBase):
	type: Literal["truefalse"] = "truefalse"
	answer_bool: Optional[str] = None


class YesNoNotGivenItem(_ItemBase):
	type: Literal["yesno_ng"] = "yesno_ng"
	answer_bool: Optional[str] = None


class MatchingPair(BaseModel):
	left: str = ""
	right: str = ""


class MatchingItem(_ItemBase):
	type: Literal["matching"] = "matching"
	pairs: List[MatchingPair] = Field(default_factory=list)


class SpeakingItem(_ItemBase):
	type: Literal["speaking"] = "speaking"


ItemSpec = Annotated[
	Union[McqItem, HeadingItem, GapItem, TrueFalseItem, YesNoNotGivenItem, MatchingItem, SpeakingItem],
	Field(discriminator="type"),
]


class GradeResult(BaseModel):
	correct: Optional[bool] = None
	expected: List[str] = Field(default_factory=list)


# ============================================================================
# CATALOG REQUEST/RESPONSE MODELS
# ============================================================================

class CreateSetRequest(BaseModel):
	exam_type: str
	title: str
	status: SetStatus = "draft"


class SetStatusRequest(BaseModel):
	status: SetStatus


class TimestampCue(BaseModel):
	start: float
	end: float
	text: str = ""


class UpdateSectionRequest(BaseModel):
	title: Optional[str] = None
	audio_url: Optional[str] = None
	transcript: Optional[str] = None
	transcript_mode: Optional[Literal["never", "afterFirstEnd", "always"]] = None
	max_replay: Optional[int] = Field(default=None, ge=0)
	timestamps: Optional[List[TimestampCue]] = None


class ItemRequest(BaseModel):
	order: int
	type: str
	prompt: str
	explanation: Optional[str] = None
	snippet: Optional[str] = None
	options: List[str] = Field(default_factory=list)
	answers: List[str] = Field(default_factory=list)
	answer_bool: Optional[Literal["true", "false", "not_given"]] = None
	polarity: Optional[Literal["tf", "yn"]] = None
	strict: bool = False
	pairs: List[MatchingPair] = Field(default_factory=list)


class ItemUpdateRequest(BaseModel):
	order: Optional[int] = None
	type: Optional[str] = None
	prompt: Optional[str] = None
	explanation: Optional[str] = None
	snippet: Optional[str] = None
	options: Optional[List[str]] = None
	answers: Optional[List[str]] = None
	answer_bool: Optional[Literal["true", "false", "not_given"]] = None
	polarity: Optional[Literal["tf", "yn"]] = None
	strict: Optional[bool] = None
	pairs: Optional[List[MatchingPair]] = None


class ItemOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	section_id: str
	order: int
	type: str
	prompt: str
	explanation: Optional[str] = None
	snippet: Optional[str] = None
	options: Optional[List[str]] = None
	answers: Optional[List[str]] = None
	answer_bool: Optional[str] = None
	polarity: Optional[str] = None
	strict: bool = False
	pairs: Optional[List[MatchingPair]] = None


class SectionOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	set_id: str
	skill: str
	order: int
	title: str
	audio_url: Optional[str] = None
	transcript: Optional[str] = None
	transcript_mode: str
	max_replay: int
	timestamps: Optional[List[TimestampCue]] = None


class SectionDetailOut(SectionOut):
	items: List[ItemOut] = Field(default_factory=list)


class SetOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	exam_type: str
	title: str
	status: str
	created_at: datetime


class SetDetailOut(SetOut):
	sections: List[SectionOut] = Field(default_factory=list)


# ============================================================================
# SUBMISSION REQUEST/RESPONSE MODELS
# ============================================================================

class AnswerIn(BaseModel):
	item_id: str
	payload: Any = None
	time_spent_ms: Optional[int] = Field(default=None, ge=0)


class SubmitRequest(BaseModel):
	answers: List[AnswerIn]
	duration_sec: Optional[int] = Field(default=None, ge=0)
	# Used only when no identity token accompanies the request
	user_id: Optional[str] = None


class GradeSubmissionRequest(BaseModel):
	teacher_score: float
	teacher_feedback: str = ""
	grader_id: Optional[str] = None


class GradedAnswer(BaseModel):
	item_id: str
	payload: Any = None
	correct: Optional[bool] = None
	expected: List[str] = Field(default_factory=list)
	explanation: Optional[str] = None
	type: str
	time_spent_ms: Optional[int] = None
	# Set when the item id did not resolve to the catalog
	anomaly: bool = False


class Analytics(BaseModel):
	accuracy: Optional[float] = None
	avg_time_per_item_ms: float = 0.0
	by_type: Dict[str, float] = Field(default_factory=dict)


class SubmissionOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	user_id: str
	anonymous: bool
	claimed_user_id: Optional[str] = None
	exam_type: str
	skill: str
	set_id: str
	section_id: Optional[str] = None
	duration_sec: Optional[int] = None
	answers: List[GradedAnswer]
	score: int
	total: int
	analytics: Optional[Analytics] = None
	teacher_score: Optional[float] = None
	teacher_feedback: str = ""
	graded_by_id: Optional[str] = None
	graded_at: Optional[datetime] = None
	created_at: datetime


class ProgressRow(BaseModel):
	set_id: str
	best_score: int
	total: int
	attempts: int
	last_attempt_at: datetime
