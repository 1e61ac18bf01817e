# gats_iqtest/core/ai_services.py
import json
import logging
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import groq
from groq import Groq

from .config import config
from .exceptions import GatewayConfigurationError, GatewayTransportError
from .fallback_data import FALLBACK_QUESTIONS, category_for_score

logger = logging.getLogger(__name__)

class TextGateway(ABC):
    """Prompt in, free-form text out."""

    name = "base"

    @abstractmethod
    def generate(self, prompt: str, temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None) -> str:
        raise NotImplementedError

    def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "mode": self.name}

class GroqGateway(TextGateway):
    """Groq chat-completions backed gateway with bounded retries"""

    name = "groq"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None, retries: Optional[int] = None,
                 backoff_seconds: float = 1.0, client: Optional[Groq] = None):
        self.api_key = config.GROQ_API_KEY if api_key is None else api_key
        self.model = model or config.GROQ_MODEL
        self.timeout = timeout or config.GROQ_TIMEOUT
        self.retries = max(1, retries or config.GROQ_RETRIES)
        self.backoff_seconds = backoff_seconds
        self._client = client

    def _get_client(self) -> Groq:
        if self._client is not None:
            return self._client

        if not self.api_key:
            raise GatewayConfigurationError("GROQ_API_KEY not provided")

        # generate() owns the retry loop
        self._client = Groq(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        logger.info(f"✅ Groq client initialized (model: {self.model})")
        return self._client

    def generate(self, prompt: str, temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None) -> str:
        """Call LLM with retry logic"""
        if temperature is None:
            temperature = config.GROQ_TEMPERATURE
        if max_tokens is None:
            max_tokens = config.GROQ_MAX_TOKENS

        client = self._get_client()
        last_error = None

        for attempt in range(self.retries):
            try:
                logger.debug(f"LLM call attempt {attempt + 1}/{self.retries}")

                completion = client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=temperature,
                    max_completion_tokens=max_tokens,
                    top_p=config.GROQ_TOP_P
                )

                if not completion.choices:
                    raise GatewayTransportError("LLM returned no response")

                return (completion.choices[0].message.content or "").strip()

            except (groq.AuthenticationError, groq.PermissionDeniedError, groq.NotFoundError) as e:
                logger.error(f"❌ Groq rejected the request configuration: {e}")
                raise GatewayConfigurationError(f"AI service configuration rejected: {e}") from e
            except (groq.APIConnectionError, groq.APIStatusError, GatewayTransportError) as e:
                last_error = e
                logger.warning(f"LLM call attempt {attempt + 1} failed: {e}")
                if attempt < self.retries - 1:
                    time.sleep(self.backoff_seconds * (2 ** attempt))

        raise GatewayTransportError(f"LLM call failed after {self.retries} attempts: {last_error}") from last_error

    def health_check(self) -> Dict[str, Any]:
        """Report readiness without spending a completion"""
        if not self.api_key and self._client is None:
            return {"status": "error", "mode": "live", "message": "GROQ_API_KEY not provided"}
        return {
            "status": "healthy",
            "mode": "live",
            "model": self.model,
            "timeout_seconds": self.timeout,
            "client_ready": self._client is not None
        }

class DummyGateway(TextGateway):
    """Offline gateway replying with canned, model-like text"""

    name = "dummy"

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)
        logger.info("🔧 AI gateway in dummy mode - using mock responses")

    def generate(self, prompt: str, temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None) -> str:
        if "Questions and Answers:" in prompt:
            payload = self._dummy_score()
            return f"Here is the assessment:\n```json\n{json.dumps(payload, indent=2)}\n```"

        questions = [dict(q, id=f"demo-{i}") for i, q in enumerate(FALLBACK_QUESTIONS, 1)]
        return f"Sure! Here are the questions:\n{json.dumps(questions, indent=2)}\nGood luck."

    def _dummy_score(self) -> Dict[str, Any]:
        score = self._random.randint(95, 125)
        percentile = min(99, max(1, 50 + (score - 100) * 2))
        categories = ["Logical Reasoning", "Pattern Recognition", "Spatial Reasoning", "Mathematical Ability"]
        return {
            "iqScore": score,
            "iqCategory": category_for_score(score),
            "percentile": percentile,
            "performance": [
                {"category": c, "percentage": self._random.randint(55, 95)} for c in categories
            ],
            "explanation": (
                "This is a demonstration result generated without the language model.\n\n"
                "Configure GROQ_API_KEY and disable USE_DUMMY_DATA for a real analysis."
            )
        }

def build_gateway() -> TextGateway:
    """Construct the gateway selected by configuration"""
    if config.USE_DUMMY_DATA:
        return DummyGateway()
    return GroqGateway()
