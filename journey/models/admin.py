# journey/models/admin.py
from datetime import datetime
from enum import Enum
from typing import List

from pydantic import Field, StrictStr, field_validator

from journey.models.document import DocumentModel, lower_enum


class AdminRole(str, Enum):
    DISTRICT_ADMIN = "district_admin"
    SCHOOL_ADMIN = "school_admin"
    SUPER_ADMIN = "super_admin"


class Admin(DocumentModel):
    REQUIRED_KEYS = (
        "email", "name", "district_name", "district_id", "role", "schools", "created_at",
    )

    id: StrictStr
    email: StrictStr
    name: StrictStr
    district_name: StrictStr
    district_id: StrictStr
    role: AdminRole
    schools: List[StrictStr] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        return lower_enum(value)
