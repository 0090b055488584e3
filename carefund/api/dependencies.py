"""Request-scoped access to the pipeline built in the app lifespan."""

from fastapi import HTTPException, Request

from carefund.infrastructure.repositories.profile_repository import ProfileRepository
from carefund.services.analysis_service import AnalysisService
from carefund.services.factory import Pipeline


def get_pipeline(request: Request) -> Pipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")
    return pipeline


def get_analysis_service(request: Request) -> AnalysisService:
    return get_pipeline(request).analysis


def get_profile_repository(request: Request) -> ProfileRepository:
    return get_pipeline(request).profiles
