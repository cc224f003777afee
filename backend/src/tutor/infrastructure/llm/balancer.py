#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ...core.settings import mask_key
from .router.types import LLMException

logger = logging.getLogger(__name__)


class KeyStatus:
	ACTIVE = "active"
	FAILED = "failed"


@dataclass(frozen=True)
class ProviderCredential:
	provider: str
	key: str
	position: int

	@property
	def masked(self) -> str:
		return mask_key(self.key)


class KeyStats:
	def __init__(self, key_id: str):
		self.key_id = key_id
		self.total_requests = 0
		self.successful_requests = 0
		self.failed_requests = 0
		self.consecutive_failures = 0
		self.last_success_time: Optional[float] = None
		self.last_failure_time: Optional[float] = None
		self.last_error: Optional[str] = None
		self.status = KeyStatus.ACTIVE

	@property
	def success_rate(self) -> float:
		if self.total_requests == 0:
			return 1.0
		return self.successful_requests / self.total_requests

	def to_dict(self) -> Dict[str, object]:
		return {
			"key": self.key_id,
			"status": self.status,
			"total_requests": self.total_requests,
			"successful_requests": self.successful_requests,
			"failed_requests": self.failed_requests,
			"consecutive_failures": self.consecutive_failures,
			"success_rate": round(self.success_rate, 3),
			"last_error": self.last_error,
		}


class CredentialPool:
	"""
	Fixed, ordered pool of provider credentials.

	Iteration order is the fallback precedence: providers in declared order,
	each provider's keys in declared order. Usage statistics are recorded per
	(provider, key) for diagnostics and never change that order.
	"""

	def __init__(self, provider_keys: Optional[Dict[str, List[str]]] = None, provider_order: Optional[List[str]] = None):
		provider_keys = provider_keys or {}
		order = provider_order if provider_order is not None else list(provider_keys.keys())
		self._credentials: Tuple[ProviderCredential, ...] = tuple(
			ProviderCredential(provider=provider, key=key, position=position)
			for provider in dict.fromkeys(order)
			for position, key in enumerate(provider_keys.get(provider) or [])
			if key
		)
		self._lock = threading.Lock()
		self._key_stats: Dict[Tuple[str, str], KeyStats] = {
			(c.provider, c.key): KeyStats(key_id=c.masked) for c in self._credentials
		}

	def __iter__(self) -> Iterator[ProviderCredential]:
		return iter(self._credentials)

	def __len__(self) -> int:
		return len(self._credentials)

	@property
	def providers(self) -> List[str]:
		return list(dict.fromkeys(c.provider for c in self._credentials))

	def report_success(self, credential: ProviderCredential) -> None:
		with self._lock:
			stats = self._key_stats.get((credential.provider, credential.key))
			if not stats:
				return
			stats.total_requests += 1
			stats.successful_requests += 1
			stats.consecutive_failures = 0
			stats.last_success_time = time.time()
			stats.status = KeyStatus.ACTIVE

	def report_failure(self, credential: ProviderCredential, error: Optional[LLMException] = None) -> None:
		with self._lock:
			stats = self._key_stats.get((credential.provider, credential.key))
			if not stats:
				return
			stats.total_requests += 1
			stats.failed_requests += 1
			stats.consecutive_failures += 1
			stats.last_failure_time = time.time()
			stats.last_error = error.error_type if error is not None else None
			stats.status = KeyStatus.FAILED

	def stats(self) -> Dict[str, List[Dict[str, object]]]:
		with self._lock:
			result: Dict[str, List[Dict[str, object]]] = {}
			for c in self._credentials:
				entry = self._key_stats[(c.provider, c.key)].to_dict()
				entry["position"] = c.position
				result.setdefault(c.provider, []).append(entry)
			return result
