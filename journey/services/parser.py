# journey/services/parser.py
"""Turn model replies into roadmap records.

Two reply shapes are understood:

* a JSON object (possibly wrapped in prose or a markdown fence) holding a
  ``recommendations`` array, used by the recommendations flow;
* a plain outline with section headers (ACADEMIC, SKILLS, RESOURCES, ...)
  and ``- [Grade N] Title: description`` lines, used by the full roadmap flow.

Both are best-effort: entries that cannot be resolved are dropped one by one
and only a reply with no usable structure fails as a whole.
"""
import json
import re
from datetime import date, datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, StrictInt, StrictStr, ValidationError

from journey.errors import InvalidAIResponseError
from journey.models.roadmap import (
    AIRecommendation,
    Milestone,
    MilestoneCategory,
    Resource,
    ResourceCategory,
    ResourceType,
    resolve_enum,
)
from journey.utils.logger import get_logger

logger = get_logger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)
GRADE_TAG_PATTERN = re.compile(r"\[Grade\s+(\d+)\]")
TYPE_TAG_PATTERN = re.compile(r"\[(\w+)\]")
URL_PATTERN = re.compile(r"https?://\S+")
BULLET_PATTERN = re.compile(r"^(?:[-*\u2022]|\d+[.)])\s*")

# Checked in this order; the first keyword contained in a line wins
SECTION_KEYWORDS = (
    ("academic", MilestoneCategory.ACADEMIC),
    ("extracurricular", MilestoneCategory.EXTRACURRICULAR),
    ("skill", MilestoneCategory.SKILL),
    ("test", MilestoneCategory.TEST),
    ("application", MilestoneCategory.APPLICATION),
    ("resource", None),
)


# Wire schema of the recommendations reply

class ResourcePayload(BaseModel):
    title: StrictStr
    description: StrictStr
    url: StrictStr
    type: StrictStr


class RecommendationPayload(BaseModel):
    title: StrictStr
    description: StrictStr
    gradeLevel: StrictInt
    category: StrictStr
    dueDate: Optional[StrictStr] = None
    resources: List[ResourcePayload]


class RecommendationsReply(BaseModel):
    recommendations: List[RecommendationPayload]


def parse_due_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        logger.debug(f"Ignoring unparsable due date {value!r}")
        return None


def parse_recommendations(text: str) -> List[AIRecommendation]:
    """Parse a JSON recommendations reply.

    Raises InvalidAIResponseError when no JSON object can be found or its
    top-level shape is wrong. Recommendations with an unknown category and
    resources with an unknown type are skipped individually.
    """
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise InvalidAIResponseError()

    try:
        reply = RecommendationsReply.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Recommendations reply did not match the expected schema: {e}")
        raise InvalidAIResponseError() from e

    recommendations = []
    for entry in reply.recommendations:
        category = resolve_enum(MilestoneCategory, entry.category)
        if category is None:
            logger.debug(f"Dropping recommendation {entry.title!r}: unknown category {entry.category!r}")
            continue

        resources = []
        for item in entry.resources:
            resource_type = resolve_enum(ResourceType, item.type)
            if resource_type is None:
                logger.debug(f"Dropping resource {item.title!r}: unknown type {item.type!r}")
                continue
            resources.append(Resource(
                title=item.title,
                description=item.description,
                url=item.url,
                type=resource_type,
                grade_level=entry.gradeLevel,
                # Every generated resource is filed under "skill"
                category=ResourceCategory.SKILL,
            ))

        recommendations.append(AIRecommendation(
            title=entry.title,
            description=entry.description,
            grade_level=entry.gradeLevel,
            category=category,
            due_date=parse_due_date(entry.dueDate),
            resources=resources,
        ))

    return recommendations


def split_title(text: str) -> Tuple[str, str]:
    text = BULLET_PATTERN.sub("", text.strip())
    title, _, description = text.partition(":")
    return title.strip(), description.strip()


def parse_milestone_line(line: str, category: MilestoneCategory, grade: int) -> Milestone:
    grade_level = grade
    match = GRADE_TAG_PATTERN.search(line)
    if match:
        grade_level = int(match.group(1))
    title, description = split_title(GRADE_TAG_PATTERN.sub("", line).strip())
    return Milestone(
        title=title,
        description=description,
        due_date=None,
        is_completed=False,
        grade_level=grade_level,
        category=category,
    )


def parse_resource_line(line: str, grade: int) -> Optional[Resource]:
    match = TYPE_TAG_PATTERN.search(line)
    if not match:
        return None
    resource_type = resolve_enum(ResourceType, match.group(1))
    if resource_type is None:
        return None

    title, description = split_title(TYPE_TAG_PATTERN.sub("", line, count=1).strip())

    url = ""
    url_match = URL_PATTERN.search(description)
    if url_match:
        url = url_match.group(0)
        description = URL_PATTERN.sub("", description, count=1).strip()

    return Resource(
        title=title,
        description=description,
        url=url,
        type=resource_type,
        grade_level=grade,
        category=ResourceCategory.SKILL,
    )


def match_section(line: str):
    """Return (is_header, category); category is None for the resources section"""
    lowered = line.lower()
    for keyword, category in SECTION_KEYWORDS:
        if keyword in lowered:
            return True, category
    return False, None


def parse_roadmap_outline(text: str, grade: int) -> Tuple[List[Milestone], List[Resource]]:
    """Parse an outline reply into milestones and resources.

    `grade` is the student's current grade, used for milestones without a
    ``[Grade N]`` tag and for every resource. Lines before the first section
    header are ignored.
    """
    milestones: List[Milestone] = []
    resources: List[Resource] = []
    category: Optional[MilestoneCategory] = None
    in_resources = False

    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue

        is_header, section = match_section(line)
        if is_header:
            category = section
            in_resources = section is None
            continue

        if in_resources:
            resource = parse_resource_line(line, grade)
            if resource is None:
                logger.debug(f"Dropping resource line {line!r}")
            else:
                resources.append(resource)
        elif category is not None:
            milestones.append(parse_milestone_line(line, category, grade))

    return milestones, resources
