"""
Analysis API Routes
Run the risk pipeline for a submitted or stored profile
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from carefund.api.dependencies import get_analysis_service, get_profile_repository
from carefund.domain.models import UserProfile
from carefund.domain.schemas.analysis import AnalysisResponse
from carefund.domain.schemas.profile import ProfileRequest
from carefund.infrastructure.repositories.profile_repository import ProfileRepository
from carefund.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AnalysisResponse)
async def analyze_profile(
    request: ProfileRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Analyze a submitted profile
    """
    result = await service.analyze(request.to_profile())
    return AnalysisResponse.from_result(result)


@router.post("/{user_id}", response_model=AnalysisResponse)
async def analyze_stored_profile(
    user_id: str,
    service: AnalysisService = Depends(get_analysis_service),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """
    Analyze the profile stored for a user
    """
    stored = await profiles.get(user_id)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"No profile stored for user {user_id}")

    result = await service.analyze(UserProfile.from_mapping(stored))
    return AnalysisResponse.from_result(result)
