# journey/services/store.py
from datetime import datetime
from typing import List, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from journey.errors import (
    DocumentNotFoundError,
    MalformedDocumentError,
    NotAuthenticatedError,
    UnknownStoreError,
)
from journey.models.admin import Admin
from journey.models.roadmap import CareerRoadmap
from journey.models.user import User
from journey.services.auth import AuthProvider
from journey.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentStore:
    """Users, roadmaps and admins persisted as MongoDB documents.

    Users and admins are keyed by their auth id. Roadmaps carry a generated
    id and are looked up by `userId`; one roadmap per user is kept by the
    callers, not by an index.
    """

    def __init__(self, database: Database, auth: AuthProvider):
        self.db = database
        self.auth = auth
        self.users = self.db.users
        self.roadmaps = self.db.careerRoadmaps
        self.admins = self.db.admins

    def _require_subject(self, user_id: Optional[str] = None) -> str:
        current = self.auth.current_user
        if current is None or (user_id is not None and current.uid != user_id):
            raise NotAuthenticatedError()
        return current.uid

    def _run(self, operation, *args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Store operation failed: {e}", extra={"error_type": type(e).__name__})
            raise UnknownStoreError(e) from e

    # User Profile
    async def get_user_profile(self, user_id: str) -> User:
        """Stored profile, or a minimal one built from the signed-in account"""
        document = self._run(self.users.find_one, {"_id": user_id})
        if document is not None:
            return User.from_document(document, document_id=user_id)

        current = self.auth.current_user
        if current is None:
            raise NotAuthenticatedError()
        return User(id=current.uid, name=current.display_name, email=current.email)

    async def create_user_profile(self, user: User) -> None:
        """Write the full profile, replacing whatever was stored"""
        self._require_subject()
        document = user.to_document()
        document["updatedAt"] = datetime.now()
        self._run(self.users.replace_one, {"_id": user.id}, document, upsert=True)
        logger.info("Saved user profile", extra={"user_id": user.id, "collection": "users"})

    def _update_user_fields(self, user_id: str, fields: dict) -> None:
        """Partial profile write; the profile must already exist"""
        self._require_subject(user_id)
        fields["updatedAt"] = datetime.now()
        result = self._run(self.users.update_one, {"_id": user_id}, {"$set": fields})
        if result.matched_count == 0:
            raise DocumentNotFoundError(f"No profile stored for user {user_id}")

    async def update_user_recommendations(self, user_id: str, recommendations: List[str]) -> None:
        self._update_user_fields(user_id, {"aiRecommendations": recommendations})

    async def update_user_progress(self, user_id: str, progress: dict) -> None:
        self._update_user_fields(user_id, {"progress": progress})

    async def get_district_students(self, district_id: str) -> List[User]:
        """Students in a district; malformed profiles are skipped"""
        students = []
        documents = self._run(lambda: list(self.users.find({"district_id": district_id})))
        for document in documents:
            try:
                students.append(User.from_document(document, document_id=str(document["_id"])))
            except MalformedDocumentError as e:
                logger.warning(f"Skipping student {document.get('_id')}: {e.message}")
        return students

    # Career Roadmap
    async def create_career_roadmap(self, roadmap: CareerRoadmap) -> None:
        self._require_subject(roadmap.user_id)
        logger.info("Creating career roadmap", extra={"user_id": roadmap.user_id, "collection": "careerRoadmaps"})
        self._run(self.roadmaps.replace_one, {"_id": roadmap.id}, roadmap.to_document(), upsert=True)

    async def update_career_roadmap(self, roadmap: CareerRoadmap) -> None:
        """Merge-write the roadmap fields onto the stored document"""
        self._require_subject(roadmap.user_id)
        logger.info("Updating career roadmap", extra={"user_id": roadmap.user_id, "collection": "careerRoadmaps"})
        self._run(self.roadmaps.update_one, {"_id": roadmap.id}, {"$set": roadmap.to_document()}, upsert=True)

    async def get_career_roadmap(self, user_id: str) -> Optional[CareerRoadmap]:
        """The signed-in user's own roadmap"""
        self._require_subject(user_id)
        return await self.find_career_roadmap(user_id)

    async def find_career_roadmap(self, user_id: str) -> Optional[CareerRoadmap]:
        """Roadmap lookup without the ownership check, for admin reporting"""
        documents = self._run(lambda: list(self.roadmaps.find({"userId": user_id}).limit(1)))
        if not documents:
            return None
        document = documents[0]
        return CareerRoadmap.from_document(document, document_id=str(document["_id"]))

    # Admin Management
    async def get_admin_profile(self, admin_id: str) -> Optional[Admin]:
        document = self._run(self.admins.find_one, {"_id": admin_id})
        if document is None:
            return None
        return Admin.from_document(document, document_id=admin_id)

    async def update_admin_profile(self, admin: Admin) -> None:
        self._run(self.admins.update_one, {"_id": admin.id}, {"$set": admin.to_document()}, upsert=True)
        logger.info("Saved admin profile", extra={"user_id": admin.id, "collection": "admins"})
