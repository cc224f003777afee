from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Optional, Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseModel):
    # "openai" covers every OpenAI-compatible chat endpoint (Groq, DeepSeek, ...)
    kind: str = "openai"
    base_url: Optional[str] = None
    model: str = ""
    api_keys: List[str] = Field(default_factory=list)
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: float = 30.0


def _default_providers() -> Dict[str, ProviderSettings]:
    return {
        "gemini": ProviderSettings(
            kind="gemini",
            base_url="https://generativelanguage.googleapis.com/v1beta",
            model="gemini-2.0-flash",
        ),
        "groq": ProviderSettings(
            kind="openai",
            base_url="https://api.groq.com/openai/v1",
            model="llama-3.1-8b-instant",
        ),
    }


class EmbeddingSettings(BaseModel):
    enabled: bool = True
    provider: str = "cohere"
    base_url: str = "https://api.cohere.ai/v1"
    model: str = "embed-english-v3.0"
    api_key: Optional[str] = None
    dimension: int = 1024
    batch_size: int = 32
    timeout: float = 30.0


class RAGSettings(BaseModel):
    store_backend: str = "json"
    base_dir: str = "knowledge_base"
    chunk_size: int = 1000
    min_chunk_length: int = 50
    keyword_max_results: int = 5
    semantic_top_k: int = 3
    similarity_threshold: float = 0.3
    history_turns: int = 6
    embed_on_ingest: bool = False
    texts_dir: Optional[str] = None


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    mask_sensitive: bool = True


class AppSettings(BaseSettings):
    app_name: str = "Chapter Tutor API"
    env: str = "dev"
    debug: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Fallback precedence: providers are tried in this order, keys in list order
    provider_order: List[str] = Field(default_factory=lambda: ["gemini", "groq"])
    providers: Dict[str, ProviderSettings] = Field(default_factory=_default_providers)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    rag: RAGSettings = Field(default_factory=RAGSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file="backend/.env",
        env_file_encoding="utf-8",
        env_prefix="TUTOR_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def ordered_providers(self) -> List[str]:
        """Provider names in fallback order; unknown names are dropped."""
        ordered = [name for name in self.provider_order if name in self.providers]
        return list(dict.fromkeys(ordered))


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


def mask_key(key: str) -> str:
    return "****" if len(key) <= 8 else f"{key[:4]}...{key[-4:]}"


def settings_diagnostics() -> Dict[str, Any]:
    """Short summary of the running configuration, with credentials masked."""
    s = get_settings()
    providers = {name: {
        "kind": p.kind,
        "model": p.model,
        "api_keys_count": len(p.api_keys or []),
        "base_url": p.base_url,
    } for name, p in (s.providers or {}).items()}
    return {
        "env": s.env,
        "provider_order": s.ordered_providers(),
        "providers": providers,
        "embedding": {
            "enabled": s.embedding.enabled,
            "provider": s.embedding.provider,
            "model": s.embedding.model,
            "api_key": mask_key(s.embedding.api_key) if s.embedding.api_key else None,
        },
        "rag": {
            "store_backend": s.rag.store_backend,
            "base_dir": s.rag.base_dir,
            "chunk_size": s.rag.chunk_size,
        },
    }
