# main.py
import asyncio
import sys

from pymongo import MongoClient

from journey.config import MONGODB_DB, MONGODB_URI
from journey.errors import ConfigurationError, JourneyError
from journey.services.ai import AIService
from journey.services.auth import AuthProvider
from journey.services.locks import RoadmapLocks
from journey.services.store import DocumentStore
from journey.utils.logger import logger
from journey.viewmodels.user import UserViewModel


def print_roadmap(roadmap):
    print(f"Roadmap: {roadmap.career_goal} (grade {roadmap.grade})")
    completed, total = roadmap.completion_counts()
    print(f"Progress: {completed}/{total} milestones")
    for milestone in roadmap.milestones:
        mark = "x" if milestone.is_completed else " "
        print(f"  [{mark}] Grade {milestone.grade_level} {milestone.category.value}: {milestone.title}")
    for resource in roadmap.resources:
        print(f"  * {resource.type.value}: {resource.title} {resource.url}".rstrip())


async def run(email: str, password: str) -> int:
    ai = AIService.from_config()

    client = MongoClient(MONGODB_URI)
    database = client[MONGODB_DB]
    auth = AuthProvider(database)
    locks = RoadmapLocks()
    view_model = UserViewModel(DocumentStore(database, auth), auth, ai, locks=locks)

    try:
        try:
            await auth.sign_in(email, password)
        except JourneyError as e:
            print(f"Sign in failed: {e.message}")
            return 1

        await view_model.load_user_profile()
        if view_model.show_profile_setup:
            print("Profile incomplete: finish setting up your profile first.")
            return 1

        await view_model.generate_recommendations()
        if view_model.error:
            print(f"Error: {view_model.error}")
            return 1

        print_roadmap(view_model.career_roadmap)
        for recommendation in view_model.recommendations:
            print(f"- {recommendation}")
        return 0
    finally:
        await ai.client.aclose()
        client.close()


def main():
    """Sign in and print a refreshed roadmap"""
    if len(sys.argv) != 3:
        print("usage: python main.py EMAIL PASSWORD")
        sys.exit(2)

    try:
        sys.exit(asyncio.run(run(sys.argv[1], sys.argv[2])))
    except ConfigurationError as e:
        logger.critical(e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
