"""
User repository for authentication and staff account management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Also answers the admin head-count questions behind the account rules.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email normalisation and password hashing.

        Args:
            user_data: Dictionary containing user information.
                      Must include: email, password, name
                      Optional: role (defaults to AGENT), phone, is_active

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is malformed, taken, or the password too short
        """
        data = dict(user_data)
        email = User.validate_email_format(data["email"])

        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        password = data.pop("password")
        create_data = {
            **data,
            "email": email,
            "hashed_password": User.hash_password(password),
            "role": data.get("role") or UserRole.AGENT,
            "is_active": data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        """Check whether another account already uses the email."""
        conditions = [User.email == email.lower().strip()]
        if exclude_id is not None:
            conditions.append(User.id != exclude_id)
        return await self.count(conditions=conditions) > 0

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials without looking at the account status.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if the password matches, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def record_login(self, user: User) -> User:
        return await self.update(user, {"last_login": datetime.now(timezone.utc)})

    async def update_password(self, user: User, new_password: str) -> User:
        """
        Replace the user's password hash.

        Args:
            user: Account to update
            new_password: New plain text password

        Returns:
            Updated user
        """
        updated = await self.update(user, {"hashed_password": User.hash_password(new_password)})
        logger.info(f"Password updated for user: {user.email}")
        return updated

    async def list_users(
        self,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={"role": role, "is_active": is_active},
            order_by=User.name.asc()
        )

    async def count_admins(self, exclude_id: Optional[uuid.UUID] = None, active_only: bool = False) -> int:
        """
        Count admin accounts, optionally ignoring one account.

        Args:
            exclude_id: Account left out of the count (the one being changed)
            active_only: Count only active admins

        Returns:
            Number of matching admins
        """
        conditions = [User.role == UserRole.ADMIN]
        if exclude_id is not None:
            conditions.append(User.id != exclude_id)
        if active_only:
            conditions.append(User.is_active.is_(True))
        return await self.count(conditions=conditions)
