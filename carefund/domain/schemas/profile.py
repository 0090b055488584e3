from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carefund.domain.models import UserProfile, WorkShift


class ProfileRequest(BaseModel):
    """Profile fields as submitted by clients; camelCase keys are accepted"""

    model_config = ConfigDict(populate_by_name=True)

    occupation: str
    city: str
    age: int
    area: str = ""
    work_shift: str = Field(default=WorkShift.DAY.value, alias="workShift")
    health_condition: str = Field(default="None", alias="healthCondition")
    addictions: str = "None"
    past_surgery: str = Field(default="None", alias="pastSurgery")
    monthly_income: Optional[int] = Field(default=0, alias="monthlyIncome")

    def to_profile(self) -> UserProfile:
        """Raises InvalidInput for values the domain rejects"""
        return UserProfile(
            occupation=self.occupation,
            city=self.city,
            age=self.age,
            area=self.area,
            work_shift=self.work_shift,
            health_condition=self.health_condition,
            addictions=self.addictions,
            past_surgery=self.past_surgery,
            monthly_income=self.monthly_income or 0,
        )


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    occupation: str
    city: str
    age: int
    area: str
    work_shift: WorkShift
    health_condition: str
    addictions: str
    past_surgery: str
    monthly_income: int
