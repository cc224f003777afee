# -*- coding: utf-8 -*-

from .balancer import CredentialPool, ProviderCredential
from .orchestrator import AttemptRecord, GenerationOrchestrator, GenerationResult

__all__ = [
	"AttemptRecord",
	"CredentialPool",
	"GenerationOrchestrator",
	"GenerationResult",
	"ProviderCredential",
]
