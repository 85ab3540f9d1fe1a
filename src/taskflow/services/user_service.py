"""User service — registration, credential checks and the profile view."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.auth.password import hash_password, verify_password
from taskflow.db.models import OrganizationMember, User
from taskflow.errors import Conflict, NotFound, Unauthenticated

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"

# Verified against when the email is unknown, so both failure paths pay
# for one bcrypt check.
_DUMMY_HASH = hash_password("taskflow-dummy-password")


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def register(self, email: str, name: str, password: str) -> User:
        """Create a user. Raises Conflict when the email is taken."""
        if await self.get_by_email(email):
            raise Conflict("User with this email already exists")

        user = User(email=email, name=name, password_hash=hash_password(password))
        self.db.add(user)
        await self.db.commit()
        logger.info("auth.user_registered", user_id=user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials.

        Unknown email and wrong password raise the identical error.
        """
        user = await self.get_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            logger.info("auth.login_failed")
            raise Unauthenticated(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed")
            raise Unauthenticated(INVALID_CREDENTIALS)

        return user

    async def get_profile(self, user_id: str) -> User:
        """User with memberships and their organizations loaded."""
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .options(
                selectinload(User.memberships).selectinload(
                    OrganizationMember.organization
                )
            )
        )
        user = result.scalars().first()
        if user is None:
            raise NotFound("User not found")
        return user
