# journey/models/roadmap.py
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr, field_validator

from journey.errors import MalformedDocumentError
from journey.models.document import DocumentModel, lower_enum
from journey.utils.logger import get_logger

logger = get_logger(__name__)


def new_id() -> str:
    return str(uuid.uuid4()).upper()


class MilestoneCategory(str, Enum):
    ACADEMIC = "academic"
    EXTRACURRICULAR = "extracurricular"
    SKILL = "skill"
    TEST = "test"
    APPLICATION = "application"


class ResourceType(str, Enum):
    ONLINE = "online"
    BOOK = "book"
    VIDEO = "video"
    COURSE = "course"
    TOOL = "tool"


class ResourceCategory(str, Enum):
    ACADEMIC = "academic"
    SKILL = "skill"
    TEST = "test"
    APPLICATION = "application"
    CAREER = "career"


def resolve_enum(enum_cls, value: Any):
    """Case-insensitive lookup against a closed set, None when unknown"""
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.lower())
    except ValueError:
        return None


class Milestone(DocumentModel):
    REQUIRED_KEYS = ("id", "title", "description", "isCompleted", "gradeLevel", "category")

    id: StrictStr = Field(default_factory=new_id)
    title: StrictStr
    description: StrictStr = ""
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    is_completed: StrictBool = Field(False, alias="isCompleted")
    grade_level: StrictInt = Field(alias="gradeLevel")
    category: MilestoneCategory

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value):
        return lower_enum(value)

    def to_document(self) -> Dict[str, Any]:
        document = super().to_document()
        document["id"] = self.id
        return document


class Resource(DocumentModel):
    REQUIRED_KEYS = ("id", "title", "description", "url", "type", "gradeLevel", "category")

    id: StrictStr = Field(default_factory=new_id)
    title: StrictStr
    description: StrictStr = ""
    url: StrictStr = ""
    type: ResourceType
    grade_level: StrictInt = Field(alias="gradeLevel")
    category: ResourceCategory = ResourceCategory.SKILL

    @field_validator("type", "category", mode="before")
    @classmethod
    def normalize_enums(cls, value):
        return lower_enum(value)

    def to_document(self) -> Dict[str, Any]:
        document = super().to_document()
        document["id"] = self.id
        return document


class AIRecommendation(BaseModel):
    """Parsed model output; converted into milestones and resources, never stored"""

    title: str
    description: str
    grade_level: int
    category: MilestoneCategory
    due_date: Optional[date] = None
    resources: List[Resource] = Field(default_factory=list)

    def to_milestone(self) -> Milestone:
        due = datetime.combine(self.due_date, datetime.min.time()) if self.due_date else None
        return Milestone(
            title=self.title,
            description=self.description,
            due_date=due,
            is_completed=False,
            grade_level=self.grade_level,
            category=self.category,
        )


def _decode_each(model_cls, items: Iterable[Any]) -> list:
    decoded = []
    for item in items:
        try:
            decoded.append(model_cls.from_document(item))
        except MalformedDocumentError as e:
            logger.debug(f"Dropping {model_cls.__name__}: {e.message}")
    return decoded


class CareerRoadmap(DocumentModel):
    """A student's milestones and resources toward one career goal.

    Every mutation of either list refreshes last_updated. Lookups are by id;
    there is no deduplication, so regenerating recommendations can append
    items that look like ones already present.
    """

    REQUIRED_KEYS = ("userId", "careerGoal", "grade")

    id: StrictStr = Field(default_factory=new_id)
    user_id: StrictStr = Field(alias="userId")
    career_goal: StrictStr = Field(alias="careerGoal")
    grade: StrictInt
    milestones: List[Milestone] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.now, alias="lastUpdated")

    @classmethod
    def from_document(cls, data: Any, document_id: Optional[str] = None) -> "CareerRoadmap":
        if isinstance(data, dict):
            data = dict(data)
            for key, model_cls in (("milestones", Milestone), ("resources", Resource)):
                items = data.get(key)
                # A single bad entry drops that entry, not the roadmap
                data[key] = _decode_each(model_cls, items) if isinstance(items, list) else []
            if data.get("lastUpdated") is None:
                data.pop("lastUpdated", None)
            data.pop("id", None)
        return super().from_document(data, document_id)

    def to_document(self) -> Dict[str, Any]:
        document = super().to_document()
        document["id"] = self.id
        document["milestones"] = [milestone.to_document() for milestone in self.milestones]
        document["resources"] = [resource.to_document() for resource in self.resources]
        return document

    def touch(self) -> None:
        self.last_updated = datetime.now()

    # Milestones

    def add_milestone(self, milestone: Milestone) -> None:
        self.milestones.append(milestone)
        self.touch()

    def update_milestone(self, milestone: Milestone) -> bool:
        for index, existing in enumerate(self.milestones):
            if existing.id == milestone.id:
                self.milestones[index] = milestone
                self.touch()
                return True
        return False

    def remove_milestone(self, milestone_id: str) -> bool:
        kept = [m for m in self.milestones if m.id != milestone_id]
        if len(kept) == len(self.milestones):
            return False
        self.milestones = kept
        self.touch()
        return True

    def get_milestone(self, milestone_id: str) -> Optional[Milestone]:
        return next((m for m in self.milestones if m.id == milestone_id), None)

    # Resources

    def add_resource(self, resource: Resource) -> None:
        self.resources.append(resource)
        self.touch()

    def update_resource(self, resource: Resource) -> bool:
        for index, existing in enumerate(self.resources):
            if existing.id == resource.id:
                self.resources[index] = resource
                self.touch()
                return True
        return False

    def remove_resource(self, resource_id: str) -> bool:
        kept = [r for r in self.resources if r.id != resource_id]
        if len(kept) == len(self.resources):
            return False
        self.resources = kept
        self.touch()
        return True

    # Derived state

    @property
    def completed_milestones(self) -> List[Milestone]:
        return [m for m in self.milestones if m.is_completed]

    @property
    def incomplete_milestones(self) -> List[Milestone]:
        return [m for m in self.milestones if not m.is_completed]

    def completion_counts(self) -> Tuple[int, int]:
        return len(self.completed_milestones), len(self.milestones)

    def apply_recommendations(self, recommendations: List[AIRecommendation]) -> None:
        """Ingest parsed recommendations: every milestone first, then every resource"""
        for recommendation in recommendations:
            self.add_milestone(recommendation.to_milestone())

        for recommendation in recommendations:
            for resource in recommendation.resources:
                self.add_resource(resource)
