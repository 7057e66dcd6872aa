# tests/test_parser.py
from datetime import date

import pytest

from journey.errors import InvalidAIResponseError
from journey.models.roadmap import MilestoneCategory, ResourceCategory, ResourceType
from journey.services.parser import (
    parse_recommendations,
    parse_resource_line,
    parse_roadmap_outline,
)


def test_single_recommendation():
    text = ('{"recommendations":[{"title":"T","description":"D","gradeLevel":10,'
            '"category":"academic","resources":[]}]}')

    recommendations = parse_recommendations(text)

    assert len(recommendations) == 1
    assert recommendations[0].grade_level == 10
    assert recommendations[0].category == MilestoneCategory.ACADEMIC
    assert recommendations[0].resources == []
    assert recommendations[0].due_date is None


def test_unknown_category_drops_entry():
    text = ('{"recommendations":[{"title":"T","description":"D","gradeLevel":10,'
            '"category":"bogus","resources":[]}]}')

    assert parse_recommendations(text) == []


def test_wrapped_reply_keeps_order_and_drops_bad_resources(recommendations_reply):
    recommendations = parse_recommendations(recommendations_reply)

    assert [r.title for r in recommendations] == ["Take AP Biology", "Volunteer at a clinic"]
    first = recommendations[0]
    assert first.category == MilestoneCategory.ACADEMIC
    assert first.due_date == date(2025, 5, 1)
    assert len(first.resources) == 1
    resource = first.resources[0]
    assert resource.type == ResourceType.ONLINE
    assert resource.category == ResourceCategory.SKILL
    assert resource.grade_level == 11
    assert resource.id


def test_resources_get_distinct_ids():
    text = ('{"recommendations":[{"title":"T","description":"D","gradeLevel":9,"category":"skill",'
            '"resources":[{"title":"A","description":"","url":"","type":"BOOK"},'
            '{"title":"B","description":"","url":"","type":"tool"}]}]}')

    resources = parse_recommendations(text)[0].resources

    assert [r.type for r in resources] == [ResourceType.BOOK, ResourceType.TOOL]
    assert resources[0].id != resources[1].id


def test_bad_due_date_is_not_fatal():
    text = ('{"recommendations":[{"title":"T","description":"D","gradeLevel":12,'
            '"category":"test","dueDate":"next spring","resources":[]}]}')

    recommendations = parse_recommendations(text)

    assert len(recommendations) == 1
    assert recommendations[0].due_date is None


@pytest.mark.parametrize("text", [
    "I cannot help with that.",
    "{not json at all}",
    '{"items": []}',
    '{"recommendations":[{"title":"T","gradeLevel":10,"category":"academic","resources":[]}]}',
])
def test_structural_failures_raise(text):
    with pytest.raises(InvalidAIResponseError):
        parse_recommendations(text)


def test_outline_milestone():
    milestones, resources = parse_roadmap_outline(
        "ACADEMIC\n- [Grade 10] Biology: Take honors biology", grade=9
    )

    assert resources == []
    assert len(milestones) == 1
    milestone = milestones[0]
    assert milestone.category == MilestoneCategory.ACADEMIC
    assert milestone.grade_level == 10
    assert milestone.title == "Biology"
    assert milestone.description == "Take honors biology"
    assert milestone.is_completed is False
    assert milestone.due_date is None


def test_outline_resource_line():
    resource = parse_resource_line("- [Online] Khan Academy: Free courses https://khanacademy.org", grade=11)

    assert resource.type == ResourceType.ONLINE
    assert resource.title == "Khan Academy"
    assert resource.description == "Free courses"
    assert resource.url == "https://khanacademy.org"
    assert resource.grade_level == 11
    assert resource.category == ResourceCategory.SKILL


def test_outline_unknown_resource_tag_dropped():
    assert parse_resource_line("- [Podcast] Foo: bar", grade=10) is None

    _, resources = parse_roadmap_outline("RESOURCES\n- [Podcast] Foo: bar", grade=10)
    assert resources == []


def test_full_outline():
    text = """Here is a plan for you.
- [Grade 9] Ignored: appears before any section

ACADEMIC
- [Grade 9] Algebra II: Strong math base

EXTRACURRICULAR
- Robotics club: Build things

SKILLS
- [Grade 11] Public speaking

RESOURCES
- [Book] Cracking the Coding Interview: Classic prep
- [Video] CS50: Lectures https://cs50.harvard.edu now
"""
    milestones, resources = parse_roadmap_outline(text, grade=10)

    assert [(m.title, m.category, m.grade_level) for m in milestones] == [
        ("Algebra II", MilestoneCategory.ACADEMIC, 9),
        ("Robotics club", MilestoneCategory.EXTRACURRICULAR, 10),
        ("Public speaking", MilestoneCategory.SKILL, 11),
    ]
    assert milestones[2].description == ""
    assert [(r.title, r.type, r.url) for r in resources] == [
        ("Cracking the Coding Interview", ResourceType.BOOK, ""),
        ("CS50", ResourceType.VIDEO, "https://cs50.harvard.edu"),
    ]
    assert resources[1].description == "Lectures  now"


def test_header_keywords_first_match_wins():
    # "Test" is matched before "resource", so this line opens the test section
    text = "TEST RESOURCES\n- [Grade 11] SAT: Practice tests weekly"

    milestones, resources = parse_roadmap_outline(text, grade=10)

    assert resources == []
    # The milestone line itself mentions "tests", so it is read as another header
    assert milestones == []


def test_header_switches_category():
    text = "SKILLS\n- Coding: Python\nAPPLICATIONS\n- [Grade 12] Common App: Submit essays"

    milestones, _ = parse_roadmap_outline(text, grade=12)

    # "Common App" line contains "app" but not "application"
    assert [m.category for m in milestones] == [MilestoneCategory.SKILL, MilestoneCategory.APPLICATION]
