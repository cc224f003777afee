from __future__ import annotations

import re
from typing import Dict, List, Union

import pytest

from tutor.core.settings import ProviderSettings
from tutor.domain.knowledge.errors import ProviderError
from tutor.infrastructure.llm.balancer import CredentialPool
from tutor.infrastructure.llm.orchestrator import GenerationOrchestrator
from tutor.infrastructure.llm.router.adapters.base import BaseLLMAdapter
from tutor.infrastructure.llm.router.core import LLMRouter
from tutor.infrastructure.llm.router.types import LLMRequest, LLMResponse
from tutor.infrastructure.rag.embedder import Embedder, EmbeddingProvider
from tutor.infrastructure.rag.pipeline import RAGConfig, RAGPipeline
from tutor.infrastructure.storage.knowledge_store import InMemoryKnowledgeStore


FRICTION_TEXT = """# Friction

## Introduction to Friction
Friction is a force that opposes relative motion between surfaces in contact. It always acts along the surfaces and opposite to the direction of motion.

## Types of Friction
Static friction acts when an object is at rest and prevents it from starting to move. Kinetic friction acts when the object is sliding over a surface. Rolling friction acts when an object rolls over a surface and is the smallest of the three.

## Reducing Friction
Lubrication with oil or grease reduces friction between moving parts of machines. Ball bearings convert sliding into rolling and are used in fans and bicycles.
"""

ELECTRIC_TEXT = """# Electric Current and Its Effects

## Electric Current
Electric current is the flow of electric charge through a conductor. It is measured in ampere and flows when a voltage is applied across a circuit.

## Heating Effect
When current flows through a wire the wire gets heated. This heating effect is used in electric heaters, irons and fuses.
"""

VOCABULARY = ["friction", "static", "kinetic", "rolling", "lubrication", "current", "voltage", "heating"]


class KeywordEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words vectors over a fixed vocabulary."""

    name = "fake"

    def __init__(self):
        super().__init__(api_key="test", model="bag-of-words", base_url="http://embed.test")
        self.calls: List[List[str]] = []

    def embed(self, texts, input_type="search_document"):
        self.calls.append(list(texts))
        vectors = []
        for text in texts:
            words = re.findall(r"[a-z]+", text.lower())
            vectors.append([float(words.count(term)) for term in VOCABULARY])
        return vectors


class FailingEmbeddingProvider(EmbeddingProvider):
    name = "down"

    def __init__(self):
        super().__init__(api_key="test", model="none", base_url="http://embed.test")

    def embed(self, texts, input_type="search_document"):
        raise ProviderError("embedding service unavailable", self.name)


Reply = Union[str, Exception]


class ScriptedAdapter(BaseLLMAdapter):
    """Answers by API key; records every request in call order."""

    def __init__(self, replies: Dict[str, Reply], calls: List[LLMRequest]):
        super().__init__()
        self.replies = replies
        self.calls = calls

    def generate(self, request: LLMRequest) -> LLMResponse:
        self.calls.append(request)
        reply = self.replies[request.api_key]
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=request.model, provider=request.provider,
                           usage={}, latency_ms=0)


def make_orchestrator(keys: Dict[str, List[str]], replies: Dict[str, Reply],
                      calls: List[LLMRequest]) -> GenerationOrchestrator:
    providers = {
        name: ProviderSettings(kind="openai", model=f"{name}-model", api_keys=list(provider_keys))
        for name, provider_keys in keys.items()
    }
    adapter = ScriptedAdapter(replies, calls)
    router = LLMRouter(adapters={name: adapter for name in keys})
    pool = CredentialPool(keys, list(keys))
    return GenerationOrchestrator(providers, pool, router=router)


@pytest.fixture
def store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def keyword_pipeline(store: InMemoryKnowledgeStore) -> RAGPipeline:
    """No embedding provider and no generation keys."""
    pipeline = RAGPipeline(RAGConfig(), store=store)
    pipeline.ingest_text("friction", "Friction", FRICTION_TEXT)
    pipeline.ingest_text("electric-current", "Electric Current and Its Effects", ELECTRIC_TEXT)
    return pipeline


@pytest.fixture
def semantic_embedder() -> Embedder:
    return Embedder(KeywordEmbeddingProvider(), dimension=len(VOCABULARY))
