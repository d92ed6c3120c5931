"""Client asynchrone pour une API de complétion compatible OpenAI."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Optional

import httpx

from listing_translator.config import settings
from listing_translator.errors import InvalidResponse, LLMError, LLMTimeout, LLMUnavailable, RateLimited

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Circuit breaker léger pour éviter les appels répétés en cas d'échec."""

    def __init__(self, failure_threshold: int = 5, timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.failures = 0
        self.last_failure_time = 0.0
        self.state = "closed"  # closed, open, half-open

    def call_failed(self) -> None:
        """Enregistre un échec."""
        self.failures += 1
        self.last_failure_time = time.time()

        if self.failures >= self.failure_threshold:
            self.state = "open"
            logger.warning("Circuit breaker OPEN after %s failures", self.failures)

    def call_succeeded(self) -> None:
        """Réinitialise l'état après un succès."""
        self.failures = 0
        self.state = "closed"

    def can_attempt(self) -> bool:
        """Indique si un appel peut être tenté."""
        if self.state == "closed":
            return True

        if self.state == "open":
            elapsed = time.time() - self.last_failure_time
            if elapsed > self.timeout:
                self.state = "half-open"
                logger.info("Circuit breaker moving to HALF-OPEN")
                return True
            return False

        # half-open: autoriser une tentative
        return True


class LLMClient:
    """Client du service de traduction LLM.

    Un appel = une requête : aucune nouvelle tentative n'est faite ici, la
    politique de reprise appartient à l'appelant.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.LLM_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.LLM_API_KEY
        self.model = model or settings.LLM_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT
        self.circuit_breaker = CircuitBreaker()

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            proxy=settings.HTTPS_PROXY or settings.HTTP_PROXY or None,
            headers=headers,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Ferme le client HTTP."""
        await self.client.aclose()

    async def check_health(self) -> bool:
        """Vérifie que l'API est joignable."""
        try:
            response = await self.client.get(f"{self.base_url}/models", timeout=5)
            return response.status_code == 200
        except Exception as exc:  # pragma: no cover - logging path
            logger.error("LLM health check failed: %s", exc)
            return False

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float = 0.0,
    ) -> str:
        """Envoie une complétion et retourne le texte produit.

        Raises:
            LLMUnavailable: circuit breaker ouvert
            RateLimited: statut 429
            LLMTimeout: délai dépassé
            InvalidResponse: statut en erreur ou réponse sans contenu
        """
        if not self.circuit_breaker.can_attempt():
            logger.warning("Circuit breaker OPEN, skipping completion")
            raise LLMUnavailable("LLM circuit breaker is open")

        payload: Dict[str, object] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            text = await asyncio.wait_for(self._post_completion(payload), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            self.circuit_breaker.call_failed()
            raise LLMTimeout(f"LLM request timed out after {self.timeout}s") from exc
        except LLMError:
            self.circuit_breaker.call_failed()
            raise
        except httpx.HTTPError as exc:
            self.circuit_breaker.call_failed()
            raise InvalidResponse(f"LLM request failed: {exc}") from exc

        self.circuit_breaker.call_succeeded()
        return text

    async def _post_completion(self, payload: Dict[str, object]) -> str:
        response = await self.client.post(f"{self.base_url}/chat/completions", json=payload)

        if response.status_code == 429:
            raise RateLimited("LLM rate limit reached (429)")
        if response.status_code != 200:
            logger.error("LLM returned status %s", response.status_code)
            raise InvalidResponse(f"LLM returned status {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise InvalidResponse(f"Unexpected LLM response format: {exc}") from exc

        generated = (content or "").strip()
        if not generated:
            logger.warning("Empty response from LLM")
            raise InvalidResponse("Empty response from LLM")
        return generated
