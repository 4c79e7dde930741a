from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import catalog
from ..db import get_db
from ..schemas import (
	CreateSetRequest,
	ItemOut,
	ItemRequest,
	ItemUpdateRequest,
	SectionDetailOut,
	SectionOut,
	SetDetailOut,
	SetOut,
	SetStatusRequest,
	UpdateSectionRequest,
)


router = APIRouter(prefix="/practice", tags=["practice_catalog"])


# ---- Sets

@router.post("/sets", response_model=SetDetailOut, status_code=201)
def create_set(req: CreateSetRequest, db: Session = Depends(get_db)):
	return catalog.create_set(db, req.exam_type, req.title, req.status)


@router.get("/sets", response_model=List[SetOut])
def list_sets(exam_type: Optional[str] = None, status: Optional[str] = None, db: Session = Depends(get_db)):
	return catalog.list_sets(db, exam_type=exam_type, status=status)


# Declared before /sets/{set_id} so "published" is not taken for an id
@router.get("/sets/published", response_model=List[SetOut])
def list_published_sets(exam_type: Optional[str] = None, db: Session = Depends(get_db)):
	return catalog.list_sets(db, exam_type=exam_type, status="published")


@router.get("/sets/{set_id}", response_model=SetDetailOut)
def get_set(set_id: str, db: Session = Depends(get_db)):
	return catalog.get_set(db, set_id)


@router.patch("/sets/{set_id}/status", response_model=SetOut)
def update_set_status(set_id: str, req: SetStatusRequest, db: Session = Depends(get_db)):
	return catalog.update_set_status(db, set_id, req.status)


@router.delete("/sets/{set_id}")
def delete_set(set_id: str, db: Session = Depends(get_db)):
	catalog.delete_set(db, set_id)
	return {"ok": True}


# ---- Sections

@router.get("/sets/{set_id}/sections", response_model=List[SectionOut])
def list_sections(set_id: str, skill: Optional[str] = None, db: Session = Depends(get_db)):
	catalog.get_set(db, set_id)
	return catalog.list_sections(db, set_id, skill=skill)


@router.get("/sections/{section_id}", response_model=SectionDetailOut)
def get_section(section_id: str, db: Session = Depends(get_db)):
	return catalog.get_section(db, section_id)


@router.patch("/sections/{section_id}", response_model=SectionOut)
def update_section(section_id: str, req: UpdateSectionRequest, db: Session = Depends(get_db)):
	return catalog.update_section(db, section_id, **req.model_dump(exclude_unset=True))


# ---- Items

@router.post("/sections/{section_id}/items", response_model=ItemOut, status_code=201)
def add_item(section_id: str, req: ItemRequest, db: Session = Depends(get_db)):
	return catalog.add_item(db, section_id, req)


@router.get("/sections/{section_id}/items", response_model=List[ItemOut])
def list_items(section_id: str, db: Session = Depends(get_db)):
	catalog.get_section(db, section_id)
	return catalog.list_items(db, section_id)


@router.put("/items/{item_id}", response_model=ItemOut)
def update_item(item_id: str, req: ItemUpdateRequest, db: Session = Depends(get_db)):
	return catalog.update_item(db, item_id, req)


@router.delete("/items/{item_id}")
def delete_item(item_id: str, db: Session = Depends(get_db)):
	catalog.delete_item(db, item_id)
	return {"ok": True}
