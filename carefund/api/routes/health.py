from fastapi import APIRouter, Depends

from carefund.api.dependencies import get_pipeline
from carefund.services.factory import Pipeline

router = APIRouter()


@router.get("/health")
def health(pipeline: Pipeline = Depends(get_pipeline)):
    cache_stats = pipeline.cache.stats()
    return {
        "status": "ok",
        "cities": len(pipeline.reference.cities),
        "occupations": len(pipeline.reference.occupations),
        "cache_entries": cache_stats["size"],
        "cache_sweep_running": pipeline.cache.running,
        "narrative_configured": pipeline.narrative.is_configured,
    }
