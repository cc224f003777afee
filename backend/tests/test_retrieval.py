import numpy as np

from tutor.domain.knowledge.schemas import RetrievalMethod
from tutor.infrastructure.rag.embedder import Embedder, cosine_similarity
from tutor.infrastructure.rag.pipeline import RAGConfig, RAGPipeline
from tutor.infrastructure.rag.retrievers.retriever_vector import EmbeddingCache, VectorRetriever

from conftest import FRICTION_TEXT, VOCABULARY, FailingEmbeddingProvider, KeywordEmbeddingProvider


def test_cosine_of_zero_vector_is_zero():
    assert cosine_similarity(np.zeros(3), np.array([1.0, 0.0, 0.0])) == 0.0
    assert cosine_similarity(np.array([1.0, 1.0]), np.array([2.0, 2.0])) == 1.0


def test_failing_provider_yields_zero_vectors():
    embedder = Embedder(FailingEmbeddingProvider(), dimension=16)

    vectors = embedder.embed_batch(["one", "two"])

    assert len(vectors) == 2
    assert all(v.shape == (16,) and not np.any(v) for v in vectors)


def test_semantic_hits_sorted_and_thresholded(store, semantic_embedder):
    pipeline = RAGPipeline(RAGConfig(), store=store, embedder=semantic_embedder)
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)
    chapter = store.get("friction")

    hits = pipeline.vector_retriever.search("static friction", chapter)

    assert hits
    assert all(h.score > 0.3 for h in hits)
    assert [h.score for h in hits] == sorted((h.score for h in hits), reverse=True)
    assert hits[0].passage.section_title == "Types of Friction"
    assert len(hits) <= 3


def test_passage_vectors_cached_until_chapter_changes(store):
    provider = KeywordEmbeddingProvider()
    cache = EmbeddingCache()
    pipeline = RAGPipeline(RAGConfig(), store=store,
                           embedder=Embedder(provider, dimension=len(VOCABULARY)),
                           embedding_cache=cache)
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)

    pipeline.ask("what is static friction", "friction", "Friction")
    pipeline.ask("what is rolling friction", "friction", "Friction")
    document_batches = [c for c in provider.calls if len(c) > 1]
    assert len(document_batches) == 1
    assert cache.stats()["hits"] == 1

    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT + "\nKinetic friction is smaller than static friction.")
    pipeline.ask("what is kinetic friction", "friction", "Friction")
    assert len([c for c in provider.calls if len(c) > 1]) == 2

    cache.clear()
    assert cache.stats()["chapters"] == 0


def test_embedding_failure_falls_back_to_keyword(store):
    pipeline = RAGPipeline(RAGConfig(), store=store,
                           embedder=Embedder(FailingEmbeddingProvider(), dimension=8))
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)

    retrieval = pipeline.retrieve("what is friction", store.get("friction"))

    assert retrieval.method == RetrievalMethod.KEYWORD
    assert retrieval.hits


def test_vector_retriever_disabled_without_provider(store, keyword_pipeline):
    retriever = VectorRetriever(Embedder(None, dimension=8))

    assert retriever.search("friction", store.get("friction")) == []


class ZeroEmbeddingProvider(KeywordEmbeddingProvider):
    """Answers successfully, but every vector is zero."""

    def embed(self, texts, input_type="search_document"):
        self.calls.append(list(texts))
        return [[0.0] * len(VOCABULARY) for _ in texts]


def test_zero_query_vector_falls_back_to_keyword(store):
    provider = ZeroEmbeddingProvider()
    pipeline = RAGPipeline(RAGConfig(), store=store,
                           embedder=Embedder(provider, dimension=len(VOCABULARY)))
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)

    retrieval = pipeline.retrieve("static friction", store.get("friction"))

    assert provider.calls == [["static friction"]]
    assert retrieval.method == RetrievalMethod.KEYWORD
    assert retrieval.hits
    assert retrieval.hits[0].passage.section_title == "Types of Friction"
