# journey/viewmodels/user.py
from enum import Enum
from typing import Callable, List, Optional

from journey.errors import JourneyError
from journey.models.roadmap import CareerRoadmap, Milestone, Resource
from journey.models.user import User
from journey.services.ai import AIService
from journey.services.auth import AuthProvider
from journey.services.locks import RoadmapLocks
from journey.services.store import DocumentStore
from journey.utils.logger import get_logger

logger = get_logger(__name__)


class RecommendationFilter(str, Enum):
    ALL = "all"
    ACADEMIC = "academic"
    EXTRACURRICULAR = "extracurricular"
    SKILLS = "skills"
    RESOURCES = "resources"


FILTER_KEYWORDS = {
    RecommendationFilter.ACADEMIC: ("course", "grade", "academic"),
    RecommendationFilter.EXTRACURRICULAR: ("club", "activity", "leadership"),
    RecommendationFilter.SKILLS: ("skill", "learn", "develop"),
    RecommendationFilter.RESOURCES: ("resource", "tool", "material"),
}


class UserViewModel:
    """Student-side state: profile, roadmap and generated recommendations.

    Operations never raise JourneyError; they record the message in `error`
    and stop. Roadmap changes are made on a copy and only become visible in
    `career_roadmap` once the store accepted them.
    """

    def __init__(self,
                 store: DocumentStore,
                 auth: AuthProvider,
                 ai: AIService,
                 locks: Optional[RoadmapLocks] = None):
        self.store = store
        self.auth = auth
        self.ai = ai
        # Containers for the same user must share one RoadmapLocks to serialize their writes
        self.locks = locks or RoadmapLocks()

        self.current_user: Optional[User] = None
        self.is_loading = False
        self.error: Optional[str] = None
        self.recommendations: List[str] = []
        self.career_roadmap: Optional[CareerRoadmap] = None
        self.selected_category = RecommendationFilter.ALL
        self.show_profile_setup = False

    def _fail(self, error: JourneyError) -> None:
        logger.error(error.message, extra={"error_type": type(error).__name__})
        self.error = error.message

    # User Profile

    async def load_user_profile(self) -> None:
        current = self.auth.current_user
        if current is None:
            self.error = "No authenticated user"
            return

        self.is_loading = True
        try:
            user = await self.store.get_user_profile(current.uid)
            self.current_user = user
            self.recommendations = list(user.ai_recommendations)

            # Only the sign-in basics so far: ask for the rest of the profile
            if not user.has_profile:
                self.show_profile_setup = True
            else:
                await self.load_career_roadmap()
        except JourneyError as e:
            self._fail(e)
        finally:
            self.is_loading = False

    def sign_out(self) -> None:
        self.auth.sign_out()
        self.current_user = None
        self.recommendations = []
        self.career_roadmap = None

    async def create_profile(self,
                             name: str,
                             grade: int,
                             career_goal: str,
                             school: str,
                             location: str,
                             interests: List[str],
                             district_id: Optional[str] = None) -> None:
        current = self.auth.current_user
        if current is None:
            self.error = "No authenticated user"
            return

        self.is_loading = True
        try:
            user = User(
                id=current.uid,
                name=name,
                email=current.email,
                grade=grade,
                career_goal=career_goal,
                school=school,
                location=location,
                interests=list(dict.fromkeys(i.strip() for i in interests if i.strip())),
                district_id=district_id,
            )
            await self.store.create_user_profile(user)
            self.current_user = user
            self.show_profile_setup = False
        except JourneyError as e:
            self._fail(e)
            return
        finally:
            self.is_loading = False

        await self.load_career_roadmap()
        await self.generate_recommendations()

    async def update_profile(self, updated_user: User) -> None:
        self.is_loading = True
        try:
            await self.store.create_user_profile(updated_user)
            self.current_user = updated_user
        except JourneyError as e:
            self._fail(e)
            return
        finally:
            self.is_loading = False

        await self.generate_recommendations()

    # Career Roadmap

    async def load_career_roadmap(self) -> None:
        """Load the user's roadmap, creating an empty one on first use"""
        user = self.current_user
        if user is None:
            return

        async with self.locks.for_user(user.id):
            try:
                roadmap = await self.store.get_career_roadmap(user.id)
                if roadmap is None:
                    roadmap = CareerRoadmap(user_id=user.id, career_goal=user.career_goal, grade=user.grade)
                    await self.store.create_career_roadmap(roadmap)
                self.career_roadmap = roadmap
            except JourneyError as e:
                self._fail(e)

    async def _latest_roadmap(self, user_id: str) -> Optional[CareerRoadmap]:
        """Stored roadmap, falling back to a copy of the loaded one; call with the user's lock held"""
        roadmap = await self.store.get_career_roadmap(user_id)
        if roadmap is None and self.career_roadmap is not None:
            roadmap = self.career_roadmap.model_copy(deep=True)
        return roadmap

    async def generate_career_roadmap(self) -> None:
        """Replace the roadmap with a fully generated one, keeping its id"""
        user = self.current_user
        if user is None:
            return

        self.is_loading = True
        try:
            async with self.locks.for_user(user.id):
                existing = await self._latest_roadmap(user.id)
                roadmap = await self.ai.generate_career_roadmap(
                    user, roadmap_id=existing.id if existing else None
                )
                await self.store.create_career_roadmap(roadmap)
                self.career_roadmap = roadmap
        except JourneyError as e:
            self._fail(e)
        finally:
            self.is_loading = False

    async def generate_recommendations(self) -> None:
        """Ask for recommendations that build on completed milestones and add them to the roadmap"""
        user = self.current_user
        if user is None:
            return

        self.is_loading = True
        try:
            async with self.locks.for_user(user.id):
                roadmap = await self._latest_roadmap(user.id)
                completed = roadmap.completed_milestones if roadmap else []
                recommendations = await self.ai.generate_career_recommendations(user, completed)

                if roadmap is None:
                    roadmap = CareerRoadmap(user_id=user.id, career_goal=user.career_goal, grade=user.grade)
                    roadmap.apply_recommendations(recommendations)
                    await self.store.create_career_roadmap(roadmap)
                else:
                    roadmap.apply_recommendations(recommendations)
                    await self.store.update_career_roadmap(roadmap)
                self.career_roadmap = roadmap

                summaries = [f"{r.title}: {r.description}" for r in recommendations]
                await self.store.update_user_recommendations(user.id, summaries)
                self.recommendations = summaries
                self.current_user = user.model_copy(update={"ai_recommendations": summaries})
        except JourneyError as e:
            self._fail(e)
        finally:
            self.is_loading = False

    @property
    def filtered_recommendations(self) -> List[str]:
        keywords = FILTER_KEYWORDS.get(self.selected_category)
        if not keywords:
            return list(self.recommendations)
        return [
            text for text in self.recommendations
            if any(keyword in text.lower() for keyword in keywords)
        ]

    async def _mutate_roadmap(self, mutate: Callable[[CareerRoadmap], Optional[bool]]) -> Optional[CareerRoadmap]:
        """Apply `mutate` to the latest roadmap under the user's lock and persist it"""
        if self.career_roadmap is None:
            return None

        user_id = self.career_roadmap.user_id
        async with self.locks.for_user(user_id):
            try:
                roadmap = await self._latest_roadmap(user_id)
                # Mutators return False when the target id was not found
                if mutate(roadmap) is False:
                    return None
                await self.store.update_career_roadmap(roadmap)
            except JourneyError as e:
                self._fail(e)
                return None
            self.career_roadmap = roadmap
            return roadmap

    # Milestone Management

    async def add_milestone(self, milestone: Milestone) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.add_milestone(milestone)) is not None

    async def update_milestone(self, milestone: Milestone) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.update_milestone(milestone)) is not None

    async def remove_milestone(self, milestone_id: str) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.remove_milestone(milestone_id)) is not None

    async def toggle_milestone_completion(self, milestone_id: str) -> None:
        """Flip a milestone, record it in the user's progress, and follow up with fresh recommendations once completed"""
        def flip(roadmap: CareerRoadmap) -> bool:
            milestone = roadmap.get_milestone(milestone_id)
            if milestone is None:
                return False
            return roadmap.update_milestone(milestone.model_copy(update={"is_completed": not milestone.is_completed}))

        roadmap = await self._mutate_roadmap(flip)
        if roadmap is None:
            return
        is_completed = roadmap.get_milestone(milestone_id).is_completed

        user = self.current_user
        if user is not None:
            progress = dict(user.progress)
            progress[milestone_id] = is_completed
            try:
                await self.store.update_user_progress(user.id, progress)
            except JourneyError as e:
                self._fail(e)
                return
            self.current_user = user.model_copy(update={"progress": progress})

        if is_completed:
            await self.generate_recommendations()

    # Resource Management

    async def add_resource(self, resource: Resource) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.add_resource(resource)) is not None

    async def update_resource(self, resource: Resource) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.update_resource(resource)) is not None

    async def remove_resource(self, resource_id: str) -> bool:
        return await self._mutate_roadmap(lambda roadmap: roadmap.remove_resource(resource_id)) is not None
