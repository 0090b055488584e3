"""
Gemini narrative client

Optional free-text enrichment of a risk assessment. Output is decoration
only: every failure path returns a static fallback and the structured
result never depends on it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx

from carefund.domain.models import OccupationHazard, RiskAssessment, RiskFactor, UserProfile

logger = logging.getLogger(__name__)

FALLBACK_NARRATIVE = "Risk analysis based on statistical data and expert guidelines."
MAX_PREVENTION_STEPS = 5

_LIST_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""
    api_key: Optional[str] = None
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.4
    max_output_tokens: int = 1024
    request_timeout_seconds: float = 30.0
    enabled: bool = True

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key and self.api_key.strip())


class NarrativeClient:
    """
    Client for Gemini text generation over REST.

    Used to explain a computed score - NOT to compute it.
    """

    def __init__(self, config: GeminiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.request_timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _generate(self, prompt: str) -> Optional[str]:
        """Return generated text, or None on any failure"""
        if not self.is_configured:
            return None

        url = f"{self.config.base_url.rstrip('/')}/models/{self.config.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }
        try:
            response = await self._get_client().post(url, params={"key": self.config.api_key}, json=body)
            response.raise_for_status()
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
            if not isinstance(text, str):
                raise TypeError(f"text part is {type(text).__name__}")
        except httpx.HTTPError as exc:
            logger.warning("Gemini request failed: %s", exc.__class__.__name__)
            return None
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("Gemini response could not be parsed: %r", exc)
            return None

        return text.strip() or None

    async def explain(self, profile: UserProfile, assessment: RiskAssessment) -> str:
        prompt = (
            "You are a health risk analyst. Explain this risk assessment to the user in "
            "3-4 short paragraphs, plain language, no diagnosis.\n"
            f"Profile: age {profile.age}, occupation {profile.occupation}, city {profile.city}, "
            f"work shift {profile.work_shift.value}, health condition {profile.health_condition}, "
            f"addictions {profile.addictions}, past surgery {profile.past_surgery}.\n"
            f"Risk score: {assessment.score}/100 ({assessment.level.value}).\n"
            f"Top factors:\n{_format_factors(assessment.top_factors(5))}"
        )
        text = await self._generate(prompt)
        if text is None:
            return FALLBACK_NARRATIVE
        return text

    async def prevention_steps(
        self,
        profile: UserProfile,
        factors: Sequence[RiskFactor],
        hazard: OccupationHazard,
    ) -> List[str]:
        """Up to five short prevention actions; empty list when unavailable"""
        prompt = (
            f"List exactly {MAX_PREVENTION_STEPS} concise prevention steps, one per line, for a "
            f"{profile.age}-year-old {profile.occupation} in {profile.city}.\n"
            f"Occupational risks: {', '.join(hazard.common_risks) or 'none listed'}.\n"
            f"Risk factors:\n{_format_factors(factors)}"
        )
        text = await self._generate(prompt)
        if text is None:
            return []

        steps = [_LIST_PREFIX.sub("", line).strip() for line in text.splitlines()]
        return [step for step in steps if step][:MAX_PREVENTION_STEPS]


def _format_factors(factors: Sequence[RiskFactor]) -> str:
    if not factors:
        return "- none"
    return "\n".join(f"- {f.category} ({f.level.value}): {f.description}" for f in factors)
