# journey/viewmodels/admin.py
from typing import List, Optional, Tuple

from journey.errors import JourneyError
from journey.models.admin import Admin
from journey.models.user import User
from journey.services.auth import AuthProvider
from journey.services.store import DocumentStore
from journey.utils.logger import get_logger

logger = get_logger(__name__)


class AdminViewModel:
    """District dashboard state for a signed-in admin"""

    def __init__(self, store: DocumentStore, auth: AuthProvider):
        self.store = store
        self.auth = auth

        self.current_admin: Optional[Admin] = None
        self.is_loading = False
        self.error: Optional[str] = None
        self.district_students: List[User] = []
        self.district_schools: List[str] = []
        self.selected_school: Optional[str] = None

    def _fail(self, error: JourneyError) -> None:
        logger.error(error.message, extra={"error_type": type(error).__name__})
        self.error = error.message

    async def load_admin_profile(self) -> None:
        current = self.auth.current_user
        if current is None:
            self.error = "No authenticated user"
            return

        self.is_loading = True
        try:
            admin = await self.store.get_admin_profile(current.uid)
            if admin is None:
                self.error = "Not authorized as admin"
                return
            self.current_admin = admin
            await self.load_district_data()
        except JourneyError as e:
            self._fail(e)
        finally:
            self.is_loading = False

    def sign_out(self) -> None:
        self.auth.sign_out()
        self.current_admin = None
        self.district_students = []
        self.district_schools = []
        self.selected_school = None

    async def load_district_data(self) -> None:
        admin = self.current_admin
        if admin is None:
            return

        try:
            self.district_schools = list(admin.schools)
            self.district_students = await self.store.get_district_students(admin.district_id)
            if self.district_schools:
                self.selected_school = self.district_schools[0]
        except JourneyError as e:
            self._fail(e)

    async def _save_schools(self, schools: List[str]) -> bool:
        updated = self.current_admin.model_copy(update={"schools": schools})
        self.is_loading = True
        try:
            await self.store.update_admin_profile(updated)
        except JourneyError as e:
            self._fail(e)
            return False
        finally:
            self.is_loading = False
        self.current_admin = updated
        self.district_schools = list(schools)
        return True

    async def add_school(self, school_name: str) -> None:
        if self.current_admin is None:
            return
        await self._save_schools(self.current_admin.schools + [school_name])

    async def remove_school(self, school_name: str) -> None:
        if self.current_admin is None:
            return
        schools = [school for school in self.current_admin.schools if school != school_name]
        if await self._save_schools(schools) and self.selected_school == school_name:
            self.selected_school = schools[0] if schools else None

    # Student Management

    @property
    def filtered_students(self) -> List[User]:
        if self.selected_school is None:
            return list(self.district_students)
        return [s for s in self.district_students if s.school == self.selected_school]

    async def get_student_progress(self, student: User) -> Tuple[int, int]:
        """(completed, total) milestones for a student, (0, 0) without a roadmap"""
        try:
            roadmap = await self.store.find_career_roadmap(student.id)
        except JourneyError as e:
            self._fail(e)
            return 0, 0
        if roadmap is None:
            return 0, 0
        return roadmap.completion_counts()

    async def generate_progress_report(self, student: User) -> str:
        if self.current_admin is None:
            return ""

        try:
            roadmap = await self.store.find_career_roadmap(student.id)
        except JourneyError as e:
            self._fail(e)
            roadmap = None

        if roadmap is None:
            return "Unable to generate progress report"

        completed = roadmap.completed_milestones
        incomplete = roadmap.incomplete_milestones
        total = len(roadmap.milestones)
        rate = int(len(completed) / total * 100) if total else 0

        lines = [
            f"Progress Report for {student.name}",
            f"School: {student.school}",
            f"Grade: {student.grade}",
            f"Career Goal: {student.career_goal}",
            "",
            "Overall Progress:",
            f"- Completed Tasks: {len(completed)}",
            f"- Remaining Tasks: {len(incomplete)}",
            f"- Completion Rate: {rate}%",
            "",
            "Completed Milestones:",
        ]
        lines += [f"- {m.title} ({m.category.value})" for m in completed]
        lines += ["", "Upcoming Tasks:"]
        lines += [f"- {m.title} ({m.category.value})" for m in incomplete[:5]]
        return "\n".join(lines)
