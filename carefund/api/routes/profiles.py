"""
Profile API Routes
Key-value profile store read by stored-profile analysis
"""

from fastapi import APIRouter, Depends, HTTPException

from carefund.api.dependencies import get_pipeline, get_profile_repository
from carefund.domain.models import UserProfile
from carefund.domain.schemas.profile import ProfileRequest, ProfileResponse
from carefund.infrastructure.repositories.profile_repository import ProfileRepository
from carefund.services.factory import Pipeline

router = APIRouter()


def _to_response(user_id: str, profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        user_id=user_id,
        occupation=profile.occupation,
        city=profile.city,
        age=profile.age,
        area=profile.area,
        work_shift=profile.work_shift,
        health_condition=profile.health_condition,
        addictions=profile.addictions,
        past_surgery=profile.past_surgery,
        monthly_income=profile.monthly_income,
    )


@router.put("/{user_id}", response_model=ProfileResponse)
async def save_profile(
    user_id: str,
    request: ProfileRequest,
    pipeline: Pipeline = Depends(get_pipeline),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """
    Validate and store a user's profile
    """
    profile = request.to_profile()
    pipeline.reference.validate_profile(profile)

    await profiles.save(user_id, {
        "occupation": profile.occupation,
        "city": profile.city,
        "age": profile.age,
        "area": profile.area,
        "workShift": profile.work_shift.value,
        "healthCondition": profile.health_condition,
        "addictions": profile.addictions,
        "pastSurgery": profile.past_surgery,
        "monthlyIncome": profile.monthly_income,
    })
    return _to_response(user_id, profile)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """
    Get a user's stored profile
    """
    stored = await profiles.get(user_id)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"No profile stored for user {user_id}")
    return _to_response(user_id, UserProfile.from_mapping(stored))
