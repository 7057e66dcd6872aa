# journey/utils/prompts.py
from langchain_core.prompts import PromptTemplate

COUNSELOR_SYSTEM_PROMPT = (
    "You are an expert college guidance counselor AI assistant with deep knowledge of academic "
    "planning, career development, and college admissions. Provide specific, actionable advice "
    "tailored to each student's unique situation."
)

RECOMMENDATIONS_PROMPT = PromptTemplate(
    input_variables=["grade", "career_goal", "school", "interests", "completed_milestones"],
    template="""
As a college guidance counselor, generate personalized recommendations for a student with the following profile:

Student Profile:
- Current Grade: {grade}
- Career Goal: {career_goal}
- School: {school}
- Interests: {interests}

Completed Milestones:
{completed_milestones}

Based on their progress and career goal, provide 3-5 specific recommendations. For each recommendation:
1. Provide a clear title and detailed description
2. Specify the appropriate grade level (9-12)
3. Assign a category (academic, extracurricular, skill, test, or application)
4. Include relevant resources (online resources, books, courses, or tools)
5. Consider timing and prerequisites

Format each recommendation in JSON:
{{
    "recommendations": [
        {{
            "title": "string",
            "description": "string",
            "gradeLevel": number,
            "category": "academic|extracurricular|skill|test|application",
            "dueDate": "YYYY-MM-DD" (optional),
            "resources": [
                {{
                    "title": "string",
                    "description": "string",
                    "url": "string",
                    "type": "online|book|video|course|tool"
                }}
            ]
        }}
    ]
}}

Ensure recommendations:
1. Build upon completed milestones
2. Are appropriate for current grade level
3. Align with career goal
4. Include specific action items
5. Provide relevant resources
""",
)

ROADMAP_PROMPT = PromptTemplate(
    input_variables=["grade", "career_goal"],
    template="""
As a college guidance counselor, create a detailed career roadmap for a grade {grade} student interested in becoming a {career_goal}.

Include specific milestones and resources organized by category. For each item, specify:
1. The appropriate grade level (9-12)
2. The category (academic, extracurricular, skill, test, or application)
3. A clear title and description
4. For resources, specify the type: online, book, video, course or tool

Format the response as follows:

ACADEMIC
- [Grade X] Course Name: Description of why this course is important

EXTRACURRICULAR
- [Grade X] Activity Name: Description of the activity and its benefits

SKILLS
- [Grade X] Skill Name: Description of how to develop this skill

TESTS
- [Grade X] Test Name: Description of test preparation and importance

APPLICATIONS
- [Grade X] Application Task: Description of the task and timeline

RESOURCES
- [Type] Resource Name: Description and URL (if applicable)

Make sure to include items appropriate for the student's current grade and future grades.
""",
)


def format_completed_milestones(milestones) -> str:
    if not milestones:
        return "No milestones completed yet."
    return "\n".join(
        f"- {m.title} (Grade {m.grade_level}, {m.category.value})" for m in milestones
    )
