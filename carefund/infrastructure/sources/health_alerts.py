"""
Health alert source: NewsAPI top health headlines for a city.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Tuple

from carefund.domain.errors import SourceUnavailable
from carefund.domain.models import AlertSeverity, HealthAlert, SourceTag
from carefund.infrastructure.sources.base import SourceFetcher

MAX_ALERTS = 3

SEVERITY_KEYWORDS = (
    (AlertSeverity.CRITICAL, ("critical", "emergency", "outbreak")),
    (AlertSeverity.HIGH, ("warning", "alert", "severe")),
    (AlertSeverity.MEDIUM, ("caution", "risk", "concern")),
)


def determine_severity(text: str) -> AlertSeverity:
    """Classify headline text by the most severe keyword it contains"""
    lowered = (text or "").lower()
    for severity, keywords in SEVERITY_KEYWORDS:
        if any(word in lowered for word in keywords):
            return severity
    return AlertSeverity.LOW


class HealthAlertFetcher(SourceFetcher[Tuple[HealthAlert, ...]]):
    name = "health_alerts"
    primary_source = "news_api"

    async def _fetch_live(self, city: str) -> Tuple[HealthAlert, ...]:
        payload = await self.http.get_json(
            self.source("news_api"),
            "/top-headlines",
            {
                "q": f"health OR disease OR outbreak AND {city}",
                "country": "in",
                "category": "health",
                "pageSize": 5,
            },
        )

        articles = payload.get("articles") or []
        alerts = []
        for article in articles[:MAX_ALERTS]:
            title = article.get("title") or ""
            description = article.get("description") or ""
            alerts.append(HealthAlert(
                title=title,
                description=description,
                severity=determine_severity(f"{title} {description}"),
                category="Health News",
                location=city,
                date=article.get("publishedAt") or "",
                source=SourceTag.live_source((article.get("source") or {}).get("name") or "NewsAPI"),
                url=article.get("url"),
            ))

        if not alerts:
            raise SourceUnavailable(self.name, "no health headlines returned")
        return tuple(alerts)

    def fallback(self, city: str) -> Tuple[HealthAlert, ...]:
        return (
            HealthAlert(
                title="General Health Advisory",
                description="Maintain regular health check-ups and follow preventive measures",
                severity=AlertSeverity.LOW,
                category="General Health",
                location=city,
                date=datetime.now(timezone.utc).isoformat(),
                source=SourceTag.fallback("System Generated"),
            ),
        )
