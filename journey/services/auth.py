# journey/services/auth.py
import uuid
from datetime import datetime
from typing import Optional

import bcrypt
from pydantic import BaseModel
from pymongo.database import Database
from pymongo.errors import PyMongoError

from journey.config import BCRYPT_ROUNDS
from journey.errors import AuthenticationError, UnknownStoreError
from journey.utils.logger import get_logger

logger = get_logger(__name__)


class AuthUser(BaseModel):
    uid: str
    display_name: str = ""
    email: str = ""


class AuthProvider:
    """Email/password accounts kept in the `accounts` collection.

    Holds the signed-in subject for the running client; `current_user` is
    None until sign_up or sign_in succeeds and again after sign_out.
    """

    def __init__(self, database: Database, rounds: int = BCRYPT_ROUNDS):
        self.accounts = database.accounts
        self.rounds = rounds
        self._current: Optional[AuthUser] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current

    @staticmethod
    def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    @staticmethod
    def verify_password(password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            return False

    async def sign_up(self, email: str, password: str, display_name: str = "") -> AuthUser:
        email = email.strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required")

        try:
            if self.accounts.find_one({"email": email}):
                raise AuthenticationError("An account with this email already exists")

            uid = uuid.uuid4().hex
            self.accounts.insert_one({
                "_id": uid,
                "email": email,
                "display_name": display_name,
                "password_hash": self.hash_password(password, self.rounds),
                "created_at": datetime.now(),
            })
        except PyMongoError as e:
            raise UnknownStoreError(e) from e

        logger.info("Account created", extra={"user_id": uid})
        self._current = AuthUser(uid=uid, display_name=display_name, email=email)
        return self._current

    async def sign_in(self, email: str, password: str) -> AuthUser:
        try:
            account = self.accounts.find_one({"email": email.strip().lower()})
        except PyMongoError as e:
            raise UnknownStoreError(e) from e

        if not account or not self.verify_password(password, account.get("password_hash", "")):
            raise AuthenticationError("Invalid email or password")

        self._current = AuthUser(
            uid=str(account["_id"]),
            display_name=account.get("display_name", ""),
            email=account.get("email", ""),
        )
        logger.info("Signed in", extra={"user_id": self._current.uid})
        return self._current

    def sign_out(self) -> None:
        self._current = None
