"""Embedding provider adapter backed by the OpenAI embeddings API.

``embed`` returns a list of floats, or ``None`` when the provider is
unavailable: no API key configured, a failed request, or a malformed
response. Callers treat ``None`` as "no vector yet" and carry on.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Protocol

from openai import OpenAI, OpenAIError

from common.config import DEFAULT_EMBEDDING_MODEL, DEFAULT_MAX_CHARS
from common.utils import truncate

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    def embed(self, text: str) -> list[float] | None: ...


def _coerce_vector(values: Any) -> list[float] | None:
    """Validate a provider payload as a non-empty list of finite floats."""
    if not isinstance(values, (list, tuple)) or not values:
        return None
    vector = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        value = float(value)
        if not math.isfinite(value):
            return None
        vector.append(value)
    return vector


class OpenAIEmbeddingProvider:
    """Single-attempt text-to-vector calls against OpenAI."""

    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        max_chars: int = DEFAULT_MAX_CHARS,
        timeout: float = 30.0,
    ):
        self.model = model
        self.api_key = api_key if api_key is not None else os.environ.get("OPENAI_API_KEY")
        self.max_chars = max_chars
        self.timeout = timeout
        self._client: OpenAI | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, max_retries=0, timeout=self.timeout)
        return self._client

    def embed(self, text: str) -> list[float] | None:
        if not self.configured:
            logger.debug("OPENAI_API_KEY not set, embeddings unavailable")
            return None

        try:
            response = self._get_client().embeddings.create(
                model=self.model,
                input=truncate(text, self.max_chars),
            )
        except OpenAIError as e:
            logger.warning("Embedding request failed (model=%s): %s", self.model, e)
            return None

        try:
            values = response.data[0].embedding
        except (AttributeError, IndexError, TypeError):
            logger.warning("Malformed embedding response (model=%s)", self.model)
            return None

        vector = _coerce_vector(values)
        if vector is None:
            logger.warning("Malformed embedding vector (model=%s)", self.model)
        return vector
