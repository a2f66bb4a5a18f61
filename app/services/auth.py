"""
Authentication service for login, token management and staff account administration.
Enforces the account rules: unique emails and at least one (active) admin at all times.
"""

from typing import Optional, Tuple, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    generate_temporary_password,
    JWTError,
    ExpiredSignatureError,
)
from app.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    NotFoundError,
    BadRequestError,
    BusinessRuleViolationError,
    DuplicateResourceError,
    InsufficientPermissionsError,
)
import uuid
import logging

logger = logging.getLogger(__name__)

# Fields a user may change on their own account
SELF_EDITABLE_FIELDS = {"name", "email", "phone", "avatar_url"}
ADMIN_ONLY_FIELDS = {"role", "is_active"}


class AuthService:
    """
    Authentication service for managing user authentication and staff accounts.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        user = await self.user_repo.authenticate_user(email, password)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.warning(f"Login refused for inactive account: {email}", extra={"user_id": str(user.id)})
            raise InactiveUserError()

        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        access_token = create_access_token(user_id=user.id, email=user.email, role=user.role)
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user, stamp the login time and create tokens.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        try:
            user = await self.authenticate_user(email, password)
            user = await self.user_repo.record_login(user)
            access_token, refresh_token = self.create_tokens(user)

            logger.info(f"User logged in: {user.email}", extra={"user_id": str(user.id)})
            return user, access_token, refresh_token

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Login error for {email}: {e}", exc_info=True)
            raise InvalidCredentialsError()

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            payload = verify_token(refresh_token, token_type="refresh")
            user = await self.user_repo.get_by_id(uuid.UUID(payload.user_id))
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        if not user:
            raise InvalidTokenError("User no longer exists")
        if not user.is_active:
            raise InactiveUserError()

        return create_access_token(user_id=user.id, email=user.email, role=user.role)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            InvalidTokenError: If token is invalid or the user is gone
            TokenExpiredError: If token is expired
        """
        try:
            payload = verify_token(token, token_type="access")
            user = await self.user_repo.get_by_id(uuid.UUID(payload.user_id))
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        if not user:
            raise InvalidTokenError("User no longer exists")
        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def list_users(
        self,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[User], int]:
        users = await self.user_repo.list_users(role=role, is_active=is_active, skip=skip, limit=limit)
        total = await self.user_repo.count(filters={"role": role, "is_active": is_active})
        return users, total

    async def create_user(self, user_data: UserCreate, current_user: User) -> User:
        """
        Register a new staff account.

        Args:
            user_data: User creation data
            current_user: Admin making the request

        Returns:
            Created user instance

        Raises:
            DuplicateResourceError: If the email is already used
        """
        try:
            if await self.user_repo.email_taken(user_data.email):
                raise DuplicateResourceError("Email already in use", field="email")

            user = await self.user_repo.create_user(user_data.model_dump())

            logger.info(
                f"User registered by {current_user.email}: {user.email}",
                extra={"user_id": str(user.id), "role": user.role.value}
            )
            return user

        except APIException:
            raise
        except ValueError as e:
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Failed to create user: {e}", exc_info=True)
            raise BadRequestError("Failed to create user")

    async def update_user(self, user_id: uuid.UUID, update_data: UserUpdate, current_user: User) -> User:
        """
        Update an account. Admins may edit any account; other users only their own,
        and never their role or active flag.

        Raises:
            InsufficientPermissionsError: Editing someone else, or an admin-only field
            NotFoundError: If user doesn't exist
            BadRequestError: If no field is sent
            DuplicateResourceError: If the new email is taken
            BusinessRuleViolationError: If the last active admin would be demoted or deactivated
        """
        try:
            if not current_user.is_admin and current_user.id != user_id:
                raise InsufficientPermissionsError("update this user")

            changes = update_data.model_dump(exclude_unset=True)
            if not current_user.is_admin and ADMIN_ONLY_FIELDS & changes.keys():
                raise InsufficientPermissionsError("change role or status")

            changes = {k: v for k, v in changes.items() if k in SELF_EDITABLE_FIELDS | ADMIN_ONLY_FIELDS}
            if not changes:
                raise BadRequestError("No valid fields to update")

            user = await self.get_user_by_id(user_id)

            if "email" in changes:
                if changes["email"] is None:
                    raise BadRequestError("Email cannot be empty")
                if await self.user_repo.email_taken(changes["email"], exclude_id=user_id):
                    raise DuplicateResourceError("Email already in use", field="email")

            if "name" in changes and not changes["name"]:
                raise BadRequestError("Name cannot be empty")

            demoted = changes.get("role") not in (None, UserRole.ADMIN)
            deactivated = changes.get("is_active") is False
            if user.is_admin and user.is_active and (demoted or deactivated):
                await self._ensure_other_active_admin(user, "demote" if demoted else "deactivate")

            changes = {k: v for k, v in changes.items() if not (k in ("role", "is_active") and v is None)}
            await self.user_repo.update(user, changes)

            logger.info(
                f"User {user_id} updated by {current_user.email}",
                extra={"user_id": str(user_id), "fields": sorted(changes)}
            )
            return await self.user_repo.get_by_id(user_id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update user {user_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update user")

    async def update_user_status(self, user_id: uuid.UUID, is_active: bool, current_user: User) -> User:
        """
        Activate or deactivate an account.

        Raises:
            NotFoundError: If user doesn't exist
            BusinessRuleViolationError: If this is the last active admin
        """
        user = await self.get_user_by_id(user_id)

        if not is_active and user.is_admin and user.is_active:
            await self._ensure_other_active_admin(user, "deactivate")

        await self.user_repo.update(user, {"is_active": is_active})

        status_text = "activated" if is_active else "deactivated"
        logger.info(f"User {status_text} by {current_user.email}: {user_id}", extra={"user_id": str(user_id)})
        return await self.user_repo.get_by_id(user_id, refresh=True)

    async def delete_user(self, user_id: uuid.UUID, current_user: User) -> None:
        """
        Delete an account.

        Raises:
            NotFoundError: If user doesn't exist
            BusinessRuleViolationError: If this is the last admin
        """
        user = await self.get_user_by_id(user_id)

        if user.is_admin and await self.user_repo.count_admins(exclude_id=user.id) == 0:
            logger.warning(f"Refused to delete the last admin {user.email}")
            raise BusinessRuleViolationError("Cannot delete the last admin")

        await self.user_repo.delete(user_id)
        logger.info(f"User deleted by {current_user.email}: {user.email}", extra={"user_id": str(user_id)})

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """
        Change the caller's own password.

        Raises:
            BadRequestError: If the current password does not match
        """
        if not user.verify_password(current_password):
            raise BadRequestError("Current password is incorrect", error_code="INVALID_PASSWORD")

        try:
            await self.user_repo.update_password(user, new_password)
        except ValueError as e:
            raise BadRequestError(str(e))

    async def reset_password(self, user_id: uuid.UUID, current_user: User) -> str:
        """
        Replace an account's password with a random temporary one.

        Returns:
            The temporary password, to be handed over to the user
        """
        user = await self.get_user_by_id(user_id)
        temp_password = generate_temporary_password()
        await self.user_repo.update_password(user, temp_password)

        logger.info(f"Password reset by {current_user.email} for {user.email}", extra={"user_id": str(user_id)})
        return temp_password

    async def _ensure_other_active_admin(self, user: User, action: str) -> None:
        remaining = await self.user_repo.count_admins(exclude_id=user.id, active_only=True)
        if remaining == 0:
            logger.warning(f"Refused to {action} the last active admin {user.email}")
            raise BusinessRuleViolationError(f"Cannot {action} the last active admin")
