import threading

from tutor.domain.knowledge.messages import APOLOGY
from tutor.infrastructure.llm.balancer import CredentialPool
from tutor.infrastructure.llm.router.types import (
    LLMNetworkError, LLMRateLimitError, LLMServerError,
)

from conftest import make_orchestrator

KEYS = {"gemini": ["g-key-one", "g-key-two"], "groq": ["q-key-one", "q-key-two"]}


def test_first_success_stops_the_chain():
    calls = []
    orchestrator = make_orchestrator(KEYS, {
        "g-key-one": LLMRateLimitError("quota", "gemini"),
        "g-key-two": "Friction opposes motion.",
        "q-key-one": "never used",
        "q-key-two": "never used",
    }, calls)

    result = orchestrator.generate([{"role": "user", "content": "what is friction"}])

    assert result.succeeded
    assert result.content == "Friction opposes motion."
    assert result.provider == "gemini"
    assert [c.api_key for c in calls] == ["g-key-one", "g-key-two"]
    assert [a.error_kind for a in result.attempts] == ["rate_limit", None]


def test_all_pairs_fail_in_declared_order():
    calls = []
    orchestrator = make_orchestrator(KEYS, {
        "g-key-one": LLMServerError("boom", "gemini", 503),
        "g-key-two": LLMNetworkError("timeout", "gemini"),
        "q-key-one": "",
        "q-key-two": LLMRateLimitError("quota", "groq"),
    }, calls)

    result = orchestrator.generate([{"role": "user", "content": "q"}])

    assert not result.succeeded
    assert result.content == APOLOGY
    assert [(c.provider, c.api_key) for c in calls] == [
        ("gemini", "g-key-one"), ("gemini", "g-key-two"),
        ("groq", "q-key-one"), ("groq", "q-key-two"),
    ]
    assert [(a.provider, a.position) for a in result.attempts] == [
        ("gemini", 0), ("gemini", 1), ("groq", 0), ("groq", 1),
    ]
    assert result.attempts[2].error_kind == "format"


def test_complete_returns_text():
    calls = []
    orchestrator = make_orchestrator({"groq": ["q-key-one"]}, {"q-key-one": "An answer."}, calls)

    assert orchestrator.complete("system", "user") == "An answer."
    assert [m["role"] for m in calls[0].messages] == ["system", "user"]
    assert calls[0].model == "groq-model"


def test_cancelled_before_first_attempt():
    calls = []
    orchestrator = make_orchestrator(KEYS, {k: "text" for keys in KEYS.values() for k in keys}, calls)
    cancel = threading.Event()
    cancel.set()

    result = orchestrator.generate([{"role": "user", "content": "q"}], cancel)

    assert result.cancelled
    assert result.content == APOLOGY
    assert calls == []


def test_stats_do_not_reorder_pool():
    calls = []
    orchestrator = make_orchestrator(KEYS, {
        "g-key-one": LLMServerError("boom", "gemini", 500),
        "g-key-two": "ok",
        "q-key-one": "ok",
        "q-key-two": "ok",
    }, calls)

    orchestrator.generate([{"role": "user", "content": "q"}])
    orchestrator.generate([{"role": "user", "content": "q"}])

    assert [c.api_key for c in calls] == ["g-key-one", "g-key-two", "g-key-one", "g-key-two"]
    stats = orchestrator.pool.stats()
    assert stats["gemini"][0]["failed_requests"] == 2
    assert stats["gemini"][1]["successful_requests"] == 2
    assert stats["gemini"][0]["key"] == "g-ke...-one"


def test_pool_skips_empty_keys_and_unknown_providers():
    pool = CredentialPool({"gemini": ["", "key-a"], "groq": ["key-b"]}, ["groq", "gemini", "groq"])

    assert [(c.provider, c.key, c.position) for c in pool] == [
        ("groq", "key-b", 0), ("gemini", "key-a", 1),
    ]


def test_no_credentials_means_not_configured():
    orchestrator = make_orchestrator({"groq": []}, {}, [])

    assert not orchestrator.configured
    assert orchestrator.generate([{"role": "user", "content": "q"}]).attempts == []
