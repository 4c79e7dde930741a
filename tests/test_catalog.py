import pytest
from sqlalchemy import inspect

from practice_engine import catalog
from practice_engine.errors import InvalidInput, NotFound
from practice_engine.models import PracticeItem, PracticeSection, PracticeSubmission
from practice_engine.schemas import ItemRequest, ItemUpdateRequest, McqItem, SpeakingItem
from practice_engine.submissions import submit_section

from conftest import AUTO_GRADED, USER_ID, section_of


def test_create_set_adds_four_sections(db, practice_set):
    skills = [s.skill for s in practice_set.sections]
    assert skills == ["listening", "reading", "writing", "speaking"]
    assert [s.order for s in practice_set.sections] == [1, 2, 3, 4]
    assert practice_set.status == "draft"


def test_create_set_requires_fields(db):
    with pytest.raises(InvalidInput):
        catalog.create_set(db, "", "Untitled")
    with pytest.raises(InvalidInput):
        catalog.create_set(db, "toeic", "  ")


def test_list_sets_filters(db):
    catalog.create_set(db, "ielts", "A", status="published")
    catalog.create_set(db, "toeic", "B", status="published")
    catalog.create_set(db, "toeic", "C")
    assert {s.title for s in catalog.list_sets(db, status="published")} == {"A", "B"}
    assert {s.title for s in catalog.list_sets(db, exam_type="toeic")} == {"B", "C"}


def test_status_change_not_policed(db, practice_set):
    catalog.update_set_status(db, practice_set.id, "published")
    updated = catalog.update_set_status(db, practice_set.id, "draft")
    assert updated.status == "draft"


def test_get_set_missing(db):
    with pytest.raises(NotFound):
        catalog.get_set(db, "nope")


def test_list_sections_by_skill(db, practice_set):
    sections = catalog.list_sections(db, practice_set.id, skill="reading")
    assert len(sections) == 1 and sections[0].skill == "reading"
    with pytest.raises(InvalidInput):
        catalog.list_sections(db, practice_set.id, skill="grammar")


def test_update_section_presentation(db, practice_set):
    section = section_of(practice_set, "listening")
    updated = catalog.update_section(
        db, section.id,
        audio_url="/uploads/audio/Bài nghe 1.mp3",
        transcript_mode="always",
        max_replay=3,
    )
    # Media references are passed through untouched
    assert updated.audio_url == "/uploads/audio/Bài nghe 1.mp3"
    assert updated.transcript_mode == "always"
    assert updated.max_replay == 3


def test_update_section_rejects_unknown_field(db, practice_set):
    section = section_of(practice_set, "listening")
    with pytest.raises(InvalidInput):
        catalog.update_section(db, section.id, skill="reading")


def test_items_ordered(db, practice_set):
    section = section_of(practice_set, "reading")
    catalog.add_item(db, section.id, ItemRequest(order=2, type="gap", prompt="Second", answers=["x"]))
    catalog.add_item(db, section.id, ItemRequest(order=1, type="truefalse", prompt="First", answer_bool="true"))
    assert [i.prompt for i in catalog.list_items(db, section.id)] == ["First", "Second"]


def test_duplicate_order_rejected(db, listening):
    section, _, _ = listening
    with pytest.raises(InvalidInput):
        catalog.add_item(db, section.id, ItemRequest(order=1, type="gap", prompt="Dup", answers=["x"]))


def test_unknown_item_type_rejected(db, practice_set):
    section = section_of(practice_set, "reading")
    with pytest.raises(InvalidInput):
        catalog.add_item(db, section.id, ItemRequest(order=1, type="essay", prompt="Write"))


def test_update_and_delete_item(db, listening):
    _, mcq, _ = listening
    updated = catalog.update_item(db, mcq.id, ItemUpdateRequest(answers=["b"]))
    assert updated.answers == ["b"]
    assert updated.options == ["cat", "dog"]
    catalog.delete_item(db, mcq.id)
    with pytest.raises(NotFound):
        catalog.get_item(db, mcq.id)


def test_update_item_rejects_null_and_blank_fields(db, listening):
    _, mcq, _ = listening
    with pytest.raises(InvalidInput, match="prompt cannot be null"):
        catalog.update_item(db, mcq.id, ItemUpdateRequest(prompt=None))
    with pytest.raises(InvalidInput, match="order cannot be null"):
        catalog.update_item(db, mcq.id, ItemUpdateRequest(order=None))
    with pytest.raises(InvalidInput, match="prompt is required"):
        catalog.update_item(db, mcq.id, ItemUpdateRequest(prompt="   "))
    assert catalog.get_item(db, mcq.id).prompt == "Which animal?"


def test_update_item_order(db, listening):
    _, mcq, _ = listening
    with pytest.raises(InvalidInput, match="order 2 already exists"):
        catalog.update_item(db, mcq.id, ItemUpdateRequest(order=2))
    assert catalog.update_item(db, mcq.id, ItemUpdateRequest(order=1)).order == 1
    assert catalog.update_item(db, mcq.id, ItemUpdateRequest(order=5)).order == 5


def test_item_spec_variants(db, listening, speaking):
    _, mcq, _ = listening
    _, talk = speaking
    assert isinstance(catalog.item_spec(mcq), McqItem)
    assert isinstance(catalog.item_spec(talk), SpeakingItem)


def test_item_spec_tolerates_bad_content(db, listening):
    _, mcq, _ = listening
    mcq.options = None
    mcq.answers = None
    spec = catalog.item_spec(mcq)
    assert spec.options == [] and spec.answers == []


def test_load_items_scoped_to_section(db, practice_set, listening):
    _, mcq, gap = listening
    reading = section_of(practice_set, "reading")
    assert set(catalog.load_items(db, [mcq.id, gap.id], section_id=mcq.section_id)) == {mcq.id, gap.id}
    assert catalog.load_items(db, [mcq.id], section_id=reading.id) == {}
    assert set(catalog.load_items(db, [mcq.id], set_id=practice_set.id)) == {mcq.id}


def test_load_items_brings_sections_along(session_factory, practice_set, listening):
    _, mcq, gap = listening
    fresh = session_factory()
    try:
        items = catalog.load_items(fresh, [mcq.id, gap.id], set_id=practice_set.id)
        for item in items.values():
            assert "section" not in inspect(item).unloaded
            assert item.section.skill == "listening"
    finally:
        fresh.close()


def test_delete_set_cascades_but_keeps_submissions(db, practice_set, listening):
    section, mcq, _ = listening
    submit_section(db, section.id, USER_ID, [{"item_id": mcq.id, "payload": "cat"}], auto_graded_skills=AUTO_GRADED)
    catalog.delete_set(db, practice_set.id)
    assert db.query(PracticeSection).count() == 0
    assert db.query(PracticeItem).count() == 0
    assert db.query(PracticeSubmission).count() == 1
