from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session, contains_eager

from .errors import InvalidInput, NotFound
from .models import PracticeItem, PracticeSection, PracticeSet
from .schemas import ITEM_TYPES, SET_STATUSES, SKILLS, ItemRequest, ItemSpec, ItemUpdateRequest


logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLES: Dict[str, str] = {
	"listening": "Listening",
	"reading": "Reading",
	"writing": "Writing",
	"speaking": "Speaking",
}

PRESENTATION_FIELDS = ("title", "audio_url", "transcript", "transcript_mode", "max_replay", "timestamps")

_item_adapter = TypeAdapter(ItemSpec)


def validate_skill(skill: Optional[str]) -> Optional[str]:
	if skill is not None and skill not in SKILLS:
		raise InvalidInput(f"skill must be one of {SKILLS}")
	return skill


def _validate_item_type(item_type: str) -> str:
	if item_type not in ITEM_TYPES:
		raise InvalidInput(f"type must be one of {ITEM_TYPES}")
	return item_type


# ---- Sets

def create_set(db: Session, exam_type: str, title: str, status: str = "draft") -> PracticeSet:
	exam_type = (exam_type or "").strip().lower()
	title = (title or "").strip()
	if not exam_type or not title:
		raise InvalidInput("exam_type and title are required")
	if status not in SET_STATUSES:
		raise InvalidInput(f"status must be one of {SET_STATUSES}")
	practice_set = PracticeSet(exam_type=exam_type, title=title, status=status)
	# One section per skill, in the fixed skill order
	for order, skill in enumerate(SKILLS, start=1):
		practice_set.sections.append(
			PracticeSection(skill=skill, order=order, title=DEFAULT_SECTION_TITLES[skill])
		)
	db.add(practice_set)
	db.commit()
	db.refresh(practice_set)
	logger.info("created practice set %s (%s)", practice_set.id, exam_type)
	return practice_set


def list_sets(db: Session, exam_type: Optional[str] = None, status: Optional[str] = None) -> List[PracticeSet]:
	stmt = select(PracticeSet)
	if exam_type:
		stmt = stmt.where(PracticeSet.exam_type == exam_type.lower())
	if status:
		stmt = stmt.where(PracticeSet.status == status)
	return list(db.scalars(stmt.order_by(PracticeSet.created_at.desc())))


def get_set(db: Session, set_id: str) -> PracticeSet:
	practice_set = db.get(PracticeSet, set_id)
	if practice_set is None:
		raise NotFound("Set not found")
	return practice_set


def update_set_status(db: Session, set_id: str, status: str) -> PracticeSet:
	if status not in SET_STATUSES:
		raise InvalidInput(f"status must be one of {SET_STATUSES}")
	practice_set = get_set(db, set_id)
	practice_set.status = status
	db.commit()
	db.refresh(practice_set)
	return practice_set


def delete_set(db: Session, set_id: str) -> None:
	practice_set = get_set(db, set_id)
	# Sections and items go with the set; submissions are kept
	db.delete(practice_set)
	db.commit()
	logger.info("deleted practice set %s", set_id)


# ---- Sections

def list_sections(db: Session, set_id: str, skill: Optional[str] = None) -> List[PracticeSection]:
	validate_skill(skill)
	stmt = select(PracticeSection).where(PracticeSection.set_id == set_id)
	if skill:
		stmt = stmt.where(PracticeSection.skill == skill)
	return list(db.scalars(stmt.order_by(PracticeSection.order)))


def get_section(db: Session, section_id: str) -> PracticeSection:
	section = db.get(PracticeSection, section_id)
	if section is None:
		raise NotFound("Section not found")
	return section


def update_section(db: Session, section_id: str, **fields: Any) -> PracticeSection:
	section = get_section(db, section_id)
	for name, value in fields.items():
		if name not in PRESENTATION_FIELDS:
			raise InvalidInput(f"Unknown section field: {name}")
		if value is not None:
			setattr(section, name, value)
	db.commit()
	db.refresh(section)
	return section


# ---- Items

REQUIRED_ITEM_FIELDS = ("order", "type", "prompt", "strict")


def _check_order_free(db: Session, section_id: str, order: int, item_id: Optional[str] = None) -> None:
	stmt = select(PracticeItem.id).where(PracticeItem.section_id == section_id, PracticeItem.order == order)
	if item_id is not None:
		stmt = stmt.where(PracticeItem.id != item_id)
	if db.scalars(stmt).first() is not None:
		raise InvalidInput(f"An item with order {order} already exists in this section")


def _check_prompt(prompt: str) -> None:
	if not prompt.strip():
		raise InvalidInput("prompt is required")


def add_item(db: Session, section_id: str, req: ItemRequest) -> PracticeItem:
	section = get_section(db, section_id)
	_validate_item_type(req.type)
	_check_prompt(req.prompt)
	_check_order_free(db, section.id, req.order)
	item = PracticeItem(
		section_id=section.id,
		order=req.order,
		type=req.type,
		prompt=req.prompt,
		explanation=req.explanation,
		snippet=req.snippet,
		options=list(req.options),
		answers=list(req.answers),
		answer_bool=req.answer_bool,
		polarity=req.polarity,
		strict=req.strict,
		pairs=[p.model_dump() for p in req.pairs],
	)
	db.add(item)
	db.commit()
	db.refresh(item)
	return item


def list_items(db: Session, section_id: str) -> List[PracticeItem]:
	stmt = select(PracticeItem).where(PracticeItem.section_id == section_id).order_by(PracticeItem.order)
	return list(db.scalars(stmt))


def get_item(db: Session, item_id: str) -> PracticeItem:
	item = db.get(PracticeItem, item_id)
	if item is None:
		raise NotFound("Item not found")
	return item


def update_item(db: Session, item_id: str, req: ItemUpdateRequest) -> PracticeItem:
	item = get_item(db, item_id)
	changes = req.model_dump(exclude_unset=True)
	for name in REQUIRED_ITEM_FIELDS:
		if name in changes and changes[name] is None:
			raise InvalidInput(f"{name} cannot be null")
	if "type" in changes:
		_validate_item_type(changes["type"])
	if "prompt" in changes:
		_check_prompt(changes["prompt"])
	if "order" in changes:
		_check_order_free(db, item.section_id, changes["order"], item_id=item.id)
	for name, value in changes.items():
		setattr(item, name, value)
	db.commit()
	db.refresh(item)
	return item


def delete_item(db: Session, item_id: str) -> None:
	item = get_item(db, item_id)
	db.delete(item)
	db.commit()


# ---- Grading lookups

def item_spec(row: PracticeItem) -> Optional[ItemSpec]:
	"""The tagged variant the grader works on, or None for a type we do not know."""
	if row.type not in ITEM_TYPES:
		return None
	data = {
		"type": row.type,
		"prompt": row.prompt or "",
		"explanation": row.explanation,
		"options": [str(o) for o in row.options or []],
		"answers": [str(a) for a in row.answers or []],
		"answer_bool": str(row.answer_bool) if row.answer_bool is not None else None,
		"strict": bool(row.strict),
		"pairs": [
			{"left": str(p.get("left") or ""), "right": str(p.get("right") or "")}
			for p in row.pairs or []
			if isinstance(p, dict)
		],
	}
	return _item_adapter.validate_python(data)


def load_items(
	db: Session,
	item_ids: Iterable[str],
	*,
	section_id: Optional[str] = None,
	set_id: Optional[str] = None,
) -> Dict[str, PracticeItem]:
	"""
	Fetch every referenced item in one query, keyed by id.

	Items outside the given section (or set) are left out, so an answer that
	points into another section is treated like an unknown item.
	"""
	ids = {str(i) for i in item_ids}
	if not ids:
		return {}
	# Sections ride along in the same query; whole-set grading reads item.section.skill
	stmt = (
		select(PracticeItem)
		.join(PracticeItem.section)
		.options(contains_eager(PracticeItem.section))
		.where(PracticeItem.id.in_(ids))
	)
	if section_id is not None:
		stmt = stmt.where(PracticeItem.section_id == section_id)
	if set_id is not None:
		stmt = stmt.where(PracticeSection.set_id == set_id)
	return {item.id: item for item in db.scalars(stmt)}
