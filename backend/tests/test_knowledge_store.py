import json
import os
import threading
import time

import pytest

from tutor.domain.knowledge.errors import StorageError
from tutor.domain.knowledge.schemas import KnowledgeChapter, Passage, Section
from tutor.infrastructure.storage.knowledge_store import InMemoryKnowledgeStore, JsonKnowledgeStore


def _chapter(chapter_id="friction", passages=None) -> KnowledgeChapter:
    texts = passages or [
        "Friction is a force that opposes relative motion between surfaces.",
        "Static friction acts on objects at rest and must be overcome to start motion.",
        "Lubrication and ball bearings are used to reduce wear in machines.",
    ]
    return KnowledgeChapter(
        id=chapter_id,
        title="Friction",
        full_text=" ".join(texts),
        sections=(Section("Basics", texts[0]),),
        passages=tuple(Passage(index=i, text=t, section_title="Basics") for i, t in enumerate(texts)),
    )


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryKnowledgeStore()
    return JsonKnowledgeStore(str(tmp_path / "kb"))


def test_save_twice_is_same_as_once(any_store):
    chapter = _chapter()
    any_store.save(chapter)
    any_store.save(chapter)

    assert any_store.list() == ["friction"]
    assert any_store.get("friction") == chapter


def test_save_replaces_record_wholesale(any_store):
    any_store.save(_chapter())
    any_store.save(_chapter(passages=["Only one passage remains after re-ingestion of this chapter."]))

    assert len(any_store.get("friction").passages) == 1


def test_delete_and_missing(any_store):
    any_store.save(_chapter())

    assert any_store.delete("friction") is True
    assert any_store.delete("friction") is False
    assert any_store.get("friction") is None
    assert any_store.search("friction", "friction") == []


def test_require_missing_chapter_raises_storage_error(any_store):
    with pytest.raises(StorageError):
        any_store.require("motion")


def test_phrase_hits_rank_before_term_hits(any_store):
    any_store.save(_chapter(passages=[
        "Kinetic energy of a sliding block is lost as heat.",
        "Static friction keeps a parked car from rolling downhill.",
        "Kinetic friction acts while surfaces slide against each other.",
    ]))

    results = any_store.search("friction", "kinetic friction")

    assert [p.index for p in results] == [2, 0, 1]


def test_short_terms_are_ignored(any_store):
    any_store.save(_chapter())

    assert any_store.search("friction", "is a of") == []


def test_duplicates_removed_and_results_capped(any_store):
    texts = [f"Friction example number {i} about surfaces in contact." for i in range(8)]
    any_store.save(_chapter(passages=texts + [texts[0]]))

    results = any_store.search("friction", "friction")

    assert len(results) == 5
    assert len({p.text for p in results}) == 5


def test_invalid_chapter_id_rejected(any_store):
    with pytest.raises(StorageError):
        any_store.save(_chapter(chapter_id="../escape"))


def test_json_store_round_trip_and_layout(tmp_path):
    base_dir = str(tmp_path / "kb")
    chapter = _chapter()
    JsonKnowledgeStore(base_dir).save(chapter)

    with open(os.path.join(base_dir, "friction.json"), encoding="utf-8") as f:
        record = json.load(f)
    assert set(record) >= {"id", "title", "content", "sections", "passages", "updatedAt"}
    assert record["passages"][1]["index"] == 1

    reloaded = JsonKnowledgeStore(base_dir).get("friction")
    assert reloaded == chapter
    assert [name for name in os.listdir(base_dir) if name.endswith(".tmp")] == []


def test_json_store_unreadable_record(tmp_path):
    base_dir = tmp_path / "kb"
    base_dir.mkdir()
    (base_dir / "friction.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        JsonKnowledgeStore(str(base_dir)).get("friction")


class _TrackingStore(JsonKnowledgeStore):
    """Records how many writers are inside ``_write`` at once."""

    def __init__(self, base_dir):
        super().__init__(base_dir)
        self.active = 0
        self.max_active = 0
        self._counter_lock = threading.Lock()

    def _write(self, chapter):
        with self._counter_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.005)
        try:
            super()._write(chapter)
        finally:
            with self._counter_lock:
                self.active -= 1


def test_concurrent_saves_of_one_chapter_are_serialized(tmp_path):
    base_dir = str(tmp_path / "kb")
    store = _TrackingStore(base_dir)
    versions = [
        _chapter(passages=[f"Version {n} of the friction chapter has exactly this passage text."] * (n + 1))
        for n in range(8)
    ]

    threads = [threading.Thread(target=store.save, args=(chapter,)) for chapter in versions]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.max_active == 1
    reloaded = JsonKnowledgeStore(base_dir).get("friction")
    assert reloaded in versions
    assert [name for name in os.listdir(base_dir) if name.endswith(".tmp")] == []


def test_trailing_punctuation_does_not_block_term_match(any_store):
    any_store.save(_chapter())

    results = any_store.search("friction", "why use lubrication?")

    assert [p.index for p in results] == [2]
