"""
Client repository: clients, their needs and interaction history.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.client import Client, ClientNeeds, Interaction, ClientRole, ClientStatus
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)

# Defaults applied when a needs profile is created without explicit values
NEEDS_DEFAULTS = {
    "min_surface": 0,
    "max_surface": 0,
    "min_price": 0,
    "max_price": 0,
}


class ClientRepository(BaseRepository[Client]):
    """
    Repository for clients. Detail queries always load needs and interactions
    so that ``Client.to_dict(include_details=True)`` never hits a lazy load.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Client, db)
        self.needs = BaseRepository(ClientNeeds, db)
        self.interactions = BaseRepository(Interaction, db)

    def _detail_query(self):
        return select(Client).options(
            selectinload(Client.needs),
            selectinload(Client.interactions),
        )

    async def get_client_with_details(self, client_id: uuid.UUID, refresh: bool = False) -> Optional[Client]:
        """
        Get a client with needs and interactions loaded.

        Args:
            client_id: UUID of the client
            refresh: Reload an instance already held by the session

        Returns:
            Client or None if not found
        """
        query = self._detail_query().where(Client.id == client_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_clients(
        self,
        role: Optional[ClientRole] = None,
        status: Optional[ClientStatus] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Client]:
        """
        List clients, newest first, with needs and interactions.

        Args:
            role: Filter by client role
            status: Filter by client status
            skip: Offset
            limit: Page size

        Returns:
            List of clients
        """
        query = self._apply_filters(self._detail_query(), {"role": role, "status": status})
        query = query.order_by(Client.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        clients = list(result.scalars().all())
        logger.debug(f"Retrieved {len(clients)} clients")
        return clients

    async def email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        conditions = [Client.email == email.lower().strip()]
        if exclude_id is not None:
            conditions.append(Client.id != exclude_id)
        return await self.count(conditions=conditions) > 0

    async def get_needs(self, client_id: uuid.UUID) -> Optional[ClientNeeds]:
        return await self.needs.get_by_field("client_id", client_id)

    async def upsert_needs(self, client_id: uuid.UUID, needs_data: Dict[str, Any], commit: bool = True) -> ClientNeeds:
        """
        Create the client's needs profile or update the existing one.

        Args:
            client_id: Owning client
            needs_data: Needs fields to store
            commit: Commit immediately, or only flush inside a wider transaction

        Returns:
            The stored needs profile
        """
        existing = await self.get_needs(client_id)
        if existing:
            return await self.needs.update(existing, needs_data, commit=commit)

        data = {**NEEDS_DEFAULTS, **{k: v for k, v in needs_data.items() if v is not None}}
        return await self.needs.create({**data, "client_id": client_id}, commit=commit)

    async def add_interaction(self, interaction_data: Dict[str, Any]) -> Interaction:
        interaction = await self.interactions.create(interaction_data)
        logger.info(f"Logged {interaction.type.value} interaction for client {interaction.client_id}")
        return interaction

    async def delete_client_cascade(self, client_id: uuid.UUID) -> bool:
        """
        Delete needs, interactions and the client itself. Flushes only; the
        caller commits.

        Returns:
            True if the client row was deleted
        """
        await self.needs.delete_where(ClientNeeds.client_id == client_id, commit=False)
        await self.interactions.delete_where(Interaction.client_id == client_id, commit=False)
        return await self.delete(client_id, commit=False)
