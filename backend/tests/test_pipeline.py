from tutor.domain.knowledge.catalog import CATALOG, canned_content
from tutor.domain.knowledge.errors import ErrorKind
from tutor.domain.knowledge.messages import TEXTBOOK_HEADER
from tutor.domain.knowledge.schemas import ChatTurn, QueryOutcome, RetrievalMethod
from tutor.infrastructure.llm.router.types import LLMServerError
from tutor.infrastructure.rag.pipeline import RAGConfig, RAGPipeline

from conftest import ELECTRIC_TEXT, FRICTION_TEXT, make_orchestrator


def _pipeline_with(store, orchestrator, embedder=None):
    pipeline = RAGPipeline(RAGConfig(), store=store, embedder=embedder, orchestrator=orchestrator)
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)
    pipeline.ingest_text("electric-current", "Electric Current and Its Effects", ELECTRIC_TEXT)
    return pipeline


def test_keyword_answer_without_providers(keyword_pipeline):
    result = keyword_pipeline.ask("what is friction", "friction", "Friction")

    assert result.outcome == QueryOutcome.COMPOSED_FALLBACK
    assert result.method == RetrievalMethod.KEYWORD
    assert result.confidence == 0.7
    assert result.content.startswith(TEXTBOOK_HEADER)
    assert "opposes relative motion" in result.content
    assert result.sources[0] == "Introduction to Friction (passage 1)"


def test_keyword_answer_with_generation(store):
    calls = []
    orchestrator = make_orchestrator({"groq": ["q-key"]}, {"q-key": "Friction resists sliding."}, calls)
    pipeline = _pipeline_with(store, orchestrator)

    result = pipeline.ask("what is friction", "friction", "Friction")

    assert result.outcome == QueryOutcome.COMPOSED
    assert result.confidence == 0.7
    assert result.provider == "groq"
    assert result.content == f"{TEXTBOOK_HEADER}\n\nFriction resists sliding."
    user_prompt = calls[0].messages[-1]["content"]
    assert user_prompt.startswith("Context from textbook:")
    assert "Student Question: what is friction" in user_prompt
    assert "physics tutor specializing in Friction" in calls[0].messages[0]["content"]


def test_semantic_answer_has_higher_confidence(store, semantic_embedder):
    orchestrator = make_orchestrator({"groq": ["q-key"]}, {"q-key": "Static friction holds."}, [])
    pipeline = _pipeline_with(store, orchestrator, semantic_embedder)

    result = pipeline.ask("tell me about static friction", "friction", "Friction")

    assert result.method == RetrievalMethod.SEMANTIC
    assert result.confidence == 0.9
    assert result.outcome == QueryOutcome.COMPOSED


def test_all_providers_failing_keeps_passages(store):
    calls = []
    orchestrator = make_orchestrator(
        {"gemini": ["g1", "g2"], "groq": ["q1"]},
        {key: LLMServerError("down", "x", 500) for key in ("g1", "g2", "q1")},
        calls,
    )
    pipeline = _pipeline_with(store, orchestrator)

    result = pipeline.ask("what is friction", "friction", "Friction")

    assert len(calls) == 3
    assert result.outcome == QueryOutcome.COMPOSED_FALLBACK
    assert result.error_kind == ErrorKind.PROVIDER.value
    assert result.confidence == 0.7
    assert "opposes relative motion" in result.content


def test_no_matching_passage_skips_generation(store):
    calls = []
    orchestrator = make_orchestrator({"groq": ["q-key"]}, {"q-key": "unused"}, calls)
    pipeline = _pipeline_with(store, orchestrator)

    result = pipeline.ask("photosynthesis?", "friction", "Friction")

    assert result.outcome == QueryOutcome.COMPOSED_EMPTY
    assert result.confidence == 0.0
    assert result.sources == ()
    assert "I can only answer questions related to Friction" in result.content
    assert calls == []


def test_off_topic_question_rejected_before_retrieval(keyword_pipeline):
    result = keyword_pipeline.ask("What is voltage?", "friction", "Friction")

    assert result.outcome == QueryOutcome.REJECTED
    assert result.error_kind == ErrorKind.RELEVANCE_MISMATCH.value
    assert result.confidence == 0.0
    assert "Electric Current" in result.content
    for title in ("Introduction to Friction", "Types of Friction", "Reducing Friction"):
        assert title in result.content


def test_missing_chapter_asks_for_ingestion(keyword_pipeline):
    result = keyword_pipeline.ask("what is velocity", "motion", "Motion")

    assert result.outcome == QueryOutcome.COMPOSED_EMPTY
    assert result.error_kind == ErrorKind.STORAGE.value
    assert "No content is loaded for **Motion**" in result.content


def test_history_turns_are_replayed(store):
    calls = []
    orchestrator = make_orchestrator({"groq": ["q-key"]}, {"q-key": "Yes."}, calls)
    pipeline = _pipeline_with(store, orchestrator)
    history = [ChatTurn("user", "what is friction"), ChatTurn("assistant", "A force.")]

    pipeline.ask("what about static friction", "friction", "Friction", history)

    assert [m["role"] for m in calls[0].messages] == ["system", "user", "assistant", "user"]


def test_unreadable_document_uses_canned_content(store):
    pipeline = RAGPipeline(RAGConfig(), store=store)

    report = pipeline.ingest_document("friction", "Friction", b"%PDF-1.4 broken", "friction.pdf")

    assert report.used_fallback
    chapter = store.get("friction")
    assert chapter.full_text == canned_content("Friction")
    assert pipeline.ask("types of friction", "friction", "Friction").confidence == 0.7


def test_text_document_is_ingested(store):
    pipeline = RAGPipeline(RAGConfig(), store=store)

    report = pipeline.ingest_document("friction", "Friction", FRICTION_TEXT.encode("utf-8"), "friction.md")

    assert not report.used_fallback
    assert report.sections == 3
    assert report.passages == 3


def test_load_catalog_from_directory(tmp_path, store):
    (tmp_path / "friction.txt").write_text(FRICTION_TEXT, encoding="utf-8")
    pipeline = RAGPipeline(RAGConfig(), store=store)

    reports = pipeline.load_catalog(str(tmp_path))

    assert [r.chapter_id for r in reports] == [c.id for c in CATALOG]
    by_id = {r.chapter_id: r for r in reports}
    assert not by_id["friction"].used_fallback
    assert by_id["motion"].used_fallback
    assert sorted(store.list()) == sorted(c.id for c in CATALOG)


def test_delete_chapter(keyword_pipeline):
    assert keyword_pipeline.delete_chapter("friction")
    assert keyword_pipeline.ask("what is friction", "friction", "Friction").error_kind == ErrorKind.STORAGE.value
