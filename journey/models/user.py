# journey/models/user.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, StrictBool, StrictInt, StrictStr

from journey.models.document import DocumentModel


class User(DocumentModel):
    REQUIRED_KEYS = (
        "name", "email", "grade", "careerGoal", "school", "location",
        "interests", "progress", "aiRecommendations", "createdAt",
    )

    # Same value as the auth subject id
    id: StrictStr
    name: StrictStr
    email: StrictStr
    grade: StrictInt = 9
    career_goal: StrictStr = Field("", alias="careerGoal")
    school: StrictStr = ""
    location: StrictStr = ""
    interests: List[StrictStr] = Field(default_factory=list)
    # milestone id -> completed
    progress: Dict[StrictStr, StrictBool] = Field(default_factory=dict)
    ai_recommendations: List[StrictStr] = Field(default_factory=list, alias="aiRecommendations")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")
    district_id: Optional[StrictStr] = Field(None, alias="district_id")

    @property
    def has_profile(self) -> bool:
        """False for the minimal record created at first sign-in"""
        return bool(self.career_goal or self.school)
