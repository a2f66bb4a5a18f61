"""
Client service: client records, search needs and the interaction log.
"""

from typing import Optional, Tuple, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import unit_of_work
from app.repositories.client import ClientRepository
from app.models.client import Client, Interaction, ClientRole, ClientStatus, ROLES_WITH_NEEDS
from app.models.user import User
from app.schemas.client import ClientCreate, ClientUpdate, InteractionCreate
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    DuplicateResourceError,
)
from datetime import datetime, timezone
import uuid
import logging

logger = logging.getLogger(__name__)


class ClientService:
    """
    Service layer for client management.
    Client and needs writes are committed together.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.client_repo = ClientRepository(db_session)

    async def get_client(self, client_id: uuid.UUID, refresh: bool = False) -> Client:
        client = await self.client_repo.get_client_with_details(client_id, refresh=refresh)
        if not client:
            raise NotFoundError("Client", str(client_id))
        return client

    async def list_clients(
        self,
        role: Optional[ClientRole] = None,
        status: Optional[ClientStatus] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Client], int]:
        """
        List clients with their needs and interactions.

        Returns:
            Tuple of (clients, total matching)
        """
        clients = await self.client_repo.list_clients(role=role, status=status, skip=skip, limit=limit)
        total = await self.client_repo.count(filters={"role": role, "status": status})
        return clients, total

    async def create_client(self, client_data: ClientCreate, current_user: User) -> Client:
        """
        Create a client and, for buyers and tenants, its needs profile.

        Args:
            client_data: Client creation data
            current_user: User creating the client

        Returns:
            Created client with details loaded

        Raises:
            DuplicateResourceError: If the email is already used
        """
        try:
            if await self.client_repo.email_taken(client_data.email):
                raise DuplicateResourceError("Email already exists", field="email")

            data = client_data.model_dump(exclude={"needs"})
            async with unit_of_work(self.db):
                client = await self.client_repo.create(data, commit=False)
                if client_data.needs and client_data.role in ROLES_WITH_NEEDS:
                    await self.client_repo.upsert_needs(client.id, client_data.needs.model_dump(), commit=False)

            logger.info(
                f"Client created: {client.email} by {current_user.email}",
                extra={"client_id": str(client.id), "role": client.role.value}
            )
            return await self.get_client(client.id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create client: {e}", exc_info=True)
            raise BadRequestError("Failed to create client")

    async def update_client(self, client_id: uuid.UUID, update_data: ClientUpdate, current_user: User) -> Client:
        """
        Update a client. Sent needs are upserted when the (new) role accepts them.

        Raises:
            NotFoundError: If the client doesn't exist
            DuplicateResourceError: If the new email is taken
        """
        try:
            client = await self.get_client(client_id)
            changes = update_data.model_dump(exclude_unset=True, exclude={"needs"})
            needs = update_data.needs

            if not changes and needs is None:
                raise BadRequestError("No valid fields to update")

            if changes.get("email"):
                if await self.client_repo.email_taken(changes["email"], exclude_id=client_id):
                    raise DuplicateResourceError("Email already exists", field="email")

            for required in ("name", "email", "phone", "role", "status", "preferred_contact_method"):
                if required in changes and changes[required] is None:
                    raise BadRequestError(f"{required} cannot be empty")

            role = changes.get("role", client.role)
            async with unit_of_work(self.db):
                if changes:
                    await self.client_repo.update(client, changes, commit=False)
                if needs is not None and role in ROLES_WITH_NEEDS:
                    await self.client_repo.upsert_needs(client_id, needs.model_dump(), commit=False)

            logger.info(
                f"Client {client_id} updated by {current_user.email}",
                extra={"client_id": str(client_id), "fields": sorted(changes)}
            )
            return await self.get_client(client_id, refresh=True)

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update client {client_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to update client")

    async def delete_client(self, client_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a client together with its needs and interactions.

        Raises:
            NotFoundError: If the client doesn't exist
        """
        if not await self.client_repo.exists(client_id):
            raise NotFoundError("Client", str(client_id))

        try:
            async with unit_of_work(self.db):
                await self.client_repo.delete_client_cascade(client_id)
        except Exception as e:
            logger.error(f"Failed to delete client {client_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to delete client")

        logger.info(f"Client {client_id} deleted by {current_user.email}", extra={"client_id": str(client_id)})

    async def add_interaction(
        self,
        client_id: uuid.UUID,
        interaction_data: InteractionCreate,
        current_user: User
    ) -> Interaction:
        """
        Log an interaction authored by the current user, dated now.

        Raises:
            NotFoundError: If the client doesn't exist
        """
        if not await self.client_repo.exists(client_id):
            raise NotFoundError("Client", str(client_id))

        data = {
            **interaction_data.model_dump(),
            "client_id": client_id,
            "user_id": current_user.id,
            "date": datetime.now(timezone.utc),
        }
        try:
            interaction = await self.client_repo.add_interaction(data)
        except Exception as e:
            logger.error(f"Failed to log interaction for client {client_id}: {e}", exc_info=True)
            raise BadRequestError("Failed to add interaction")

        return await self.client_repo.interactions.get_by_id(interaction.id, refresh=True)
