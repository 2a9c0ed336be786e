"""User registration and login backed by the "user" collection."""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document
from errors import BadRequest, Conflict, InvalidCredentials
from schemas import User
from security import TokenSigner, hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    collection_name = "user"

    def __init__(self, db: Database, signer: TokenSigner, bcrypt_rounds: int = 12):
        self.db = db
        self.collection = db[self.collection_name]
        self.signer = signer
        self.bcrypt_rounds = bcrypt_rounds

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": normalize_email(email)})

    def register(self, email: str, password: str) -> str:
        """Create a user and return a fresh token. Raises Conflict on a taken email."""
        email = normalize_email(email)
        if self.get_by_email(email):
            raise Conflict("Email already registered")

        try:
            user = User(email=email, password_hash=hash_password(password, self.bcrypt_rounds))
        except ValidationError:
            raise BadRequest("Invalid email")

        try:
            doc = create_document(self.db, self.collection_name, user.model_dump())
        except DuplicateKeyError:
            # Lost a race against a concurrent registration
            raise Conflict("Email already registered")

        user_id = str(doc["_id"])
        logger.info("Registered user %s", user_id)
        return self.signer.issue(user_id)

    def login(self, email: str, password: str) -> str:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.get("password_hash", "")):
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        return self.signer.issue(str(user["_id"]))
