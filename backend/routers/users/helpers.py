from sqlalchemy.ext.asyncio import AsyncSession
from models import User
from repositories import UserRepository
from .schemas import IdentifyRequest
from typing import Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Unknown"


class UserHelpers:
    """Helper functions for user operations"""

    async def identify(self, db: AsyncSession, payload: IdentifyRequest) -> Tuple[User, bool]:
        """
        Create the user on first sight, otherwise overwrite name, email and role.
        Role changes are allowed on re-identification. An omitted location keeps
        the stored one.

        Returns the user and whether it was created.
        """
        users = UserRepository(db)
        role = payload.role.value
        user = await users.find_by_id(payload.id)

        if user is None:
            user = await users.create(
                user_id=payload.id,
                name=payload.name,
                email=payload.email,
                role=role,
                location=payload.location or DEFAULT_LOCATION
            )
            await db.commit()
            logger.info(f"User profile created: {user.id} ({role})")
            return user, True

        if user.role != role:
            logger.info(f"User {user.id} changed role from {user.role} to {role}")

        await users.update(
            user,
            name=payload.name,
            email=payload.email,
            role=role,
            location=payload.location or user.location
        )
        await db.commit()
        return user, False


user_helpers = UserHelpers()
