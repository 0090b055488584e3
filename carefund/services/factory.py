"""
Pipeline wiring: one owned cache, one HTTP client, one analysis service.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx

from carefund.config import Settings, settings as default_settings
from carefund.domain.services.financial_planner import FinancialPlanner
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.domain.services.risk_engine import RiskEngine
from carefund.infrastructure.cache.ttl_cache import TTLCache
from carefund.infrastructure.narrative.gemini_client import GeminiConfig, NarrativeClient
from carefund.infrastructure.repositories.profile_repository import InMemoryProfileRepository, ProfileRepository
from carefund.infrastructure.sources.factory import SourceFetchers, build_fetchers, build_source_configs
from carefund.infrastructure.sources.http_client import ResilientFetcher
from carefund.services.aggregator import DataAggregator
from carefund.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def resolve_config_dir(settings: Settings) -> Path:
    if settings.CONFIG_DIR:
        return Path(settings.CONFIG_DIR)
    return DEFAULT_CONFIG_DIR


@dataclass
class Pipeline:
    reference: ReferenceEngine
    cache: TTLCache
    http: ResilientFetcher
    fetchers: SourceFetchers
    aggregator: DataAggregator
    analysis: AnalysisService
    narrative: NarrativeClient
    profiles: ProfileRepository

    def start(self) -> None:
        """Start background work (cache sweep); needs a running event loop"""
        self.cache.start()

    async def close(self) -> None:
        await self.cache.stop()
        await self.http.close()
        await self.narrative.close()
        logger.info("Pipeline closed")


def build_pipeline(
    settings: Optional[Settings] = None,
    config_dir: Optional[Path] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    narrative_transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    profiles: Optional[ProfileRepository] = None,
) -> Pipeline:
    """
    Build the analysis pipeline.

    Args:
        settings: environment settings (defaults to the process settings)
        config_dir: reference YAML directory (defaults to settings/config)
        transport: httpx transport for data sources, e.g. httpx.MockTransport
        narrative_transport: httpx transport for the narrative client
        sleep: backoff sleep, replaceable in tests
        profiles: profile store (defaults to in-memory)
    """
    settings = settings or default_settings
    reference = ReferenceEngine(config_dir or resolve_config_dir(settings))
    reference.load_all()

    cache = TTLCache(sweep_interval_seconds=settings.CACHE_SWEEP_INTERVAL_SECONDS)
    http = ResilientFetcher(transport=transport, sleep=sleep)
    fetchers = build_fetchers(reference, http, cache, build_source_configs(reference, settings))
    aggregator = DataAggregator(reference, fetchers)

    narrative = NarrativeClient(
        GeminiConfig(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            request_timeout_seconds=settings.GEMINI_TIMEOUT_SECONDS,
            enabled=settings.NARRATIVE_ENABLED,
        ),
        transport=narrative_transport,
    )
    if not narrative.is_configured:
        logger.info("Narrative enrichment not configured, using fallback text")

    analysis = AnalysisService(
        reference=reference,
        aggregator=aggregator,
        risk_engine=RiskEngine(),
        planner=FinancialPlanner(reference.get_plan_tiers()),
        narrative=narrative,
    )

    return Pipeline(
        reference=reference,
        cache=cache,
        http=http,
        fetchers=fetchers,
        aggregator=aggregator,
        analysis=analysis,
        narrative=narrative,
        profiles=profiles or InMemoryProfileRepository(),
    )
