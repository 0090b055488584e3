"""
Source fetcher factory (config-driven).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from carefund.config import Settings
from carefund.domain.services.reference_engine import ReferenceEngine
from carefund.infrastructure.cache.ttl_cache import TTLCache
from carefund.infrastructure.sources.climate import ClimateFetcher
from carefund.infrastructure.sources.crime import CrimeFetcher
from carefund.infrastructure.sources.death_rate import DeathRateFetcher
from carefund.infrastructure.sources.health_alerts import HealthAlertFetcher
from carefund.infrastructure.sources.http_client import ResilientFetcher
from carefund.infrastructure.sources.occupation import OccupationDeathRateFetcher
from carefund.infrastructure.sources.types import SourceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFetchers:
    climate: ClimateFetcher
    death_rate: DeathRateFetcher
    occupation_death_rate: OccupationDeathRateFetcher
    crime: CrimeFetcher
    health_alerts: HealthAlertFetcher


def build_source_configs(reference: ReferenceEngine, settings: Settings) -> Dict[str, SourceConfig]:
    """Combine sources.yml with API keys from the environment"""
    configs: Dict[str, SourceConfig] = {}
    for name, data in reference.get_source_settings().items():
        key_setting = data.get("api_key_setting")
        api_key = None
        if key_setting:
            api_key = (getattr(settings, key_setting, None) or "").strip() or None
            if data.get("requires_auth_key") and api_key is None:
                logger.info("Source '%s' has no %s set; it will use fallback values", name, key_setting)
        configs[name] = SourceConfig.from_mapping(name, data, api_key=api_key)
    return configs


def build_fetchers(
    reference: ReferenceEngine,
    http: ResilientFetcher,
    cache: TTLCache,
    configs: Dict[str, SourceConfig],
) -> SourceFetchers:
    common = dict(http=http, cache=cache, sources=configs)
    return SourceFetchers(
        climate=ClimateFetcher(reference=reference, **common),
        death_rate=DeathRateFetcher(reference=reference, **common),
        occupation_death_rate=OccupationDeathRateFetcher(reference=reference, **common),
        crime=CrimeFetcher(reference=reference, **common),
        health_alerts=HealthAlertFetcher(**common),
    )
