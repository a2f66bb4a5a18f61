"""
Tests for calendar visits and the double-booking check.
"""

import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient
from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.client import Client
from app.models.property import Property
from app.models.visit import PropertyVisit, VisitStatus, VisitType, as_utc
from app.repositories.visit import VisitRepository
from app.schemas.visit import VisitCreate
from app.services.calendar import CalendarService
from app.utils.exceptions import SchedulingConflictError
from tests.conftest import PropertyFactory, assert_error

SLOT = datetime(2031, 3, 10, 10, 0, tzinfo=timezone.utc)


def visit_payload(property_obj: Property, client: Client, start: datetime = SLOT, **overrides) -> dict:
    payload = {
        "property_id": str(property_obj.id),
        "client_id": str(client.id),
        "scheduled_date": start.isoformat(),
        "duration": 60,
        "type": "first_viewing",
    }
    payload.update(overrides)
    return payload


class TestVisitOverlap:
    """Inclusive interval test on the model."""

    def make_visit(self, start: datetime = SLOT, duration: int = 60) -> PropertyVisit:
        return PropertyVisit(scheduled_date=start, duration=duration, status=VisitStatus.SCHEDULED)

    def test_overlapping_slot(self):
        visit = self.make_visit()
        assert visit.overlaps(SLOT + timedelta(minutes=30), SLOT + timedelta(minutes=90))

    def test_slot_inside_visit(self):
        visit = self.make_visit(duration=120)
        assert visit.overlaps(SLOT + timedelta(minutes=15), SLOT + timedelta(minutes=45))

    def test_visit_inside_slot(self):
        visit = self.make_visit(start=SLOT + timedelta(minutes=30), duration=15)
        assert visit.overlaps(SLOT, SLOT + timedelta(hours=2))

    def test_touching_bounds_collide(self):
        visit = self.make_visit()
        assert visit.overlaps(SLOT + timedelta(minutes=60), SLOT + timedelta(minutes=120))
        assert visit.overlaps(SLOT - timedelta(minutes=60), SLOT)

    def test_disjoint_slots(self):
        visit = self.make_visit()
        assert not visit.overlaps(SLOT + timedelta(minutes=61), SLOT + timedelta(minutes=120))
        assert not visit.overlaps(SLOT - timedelta(hours=2), SLOT - timedelta(minutes=1))

    def test_naive_datetimes_are_utc(self):
        visit = self.make_visit(start=SLOT.replace(tzinfo=None))
        assert visit.starts_at == SLOT
        assert visit.overlaps(datetime(2031, 3, 10, 10, 30), datetime(2031, 3, 10, 11, 30))

    def test_as_utc_converts_offsets(self):
        local = datetime(2031, 3, 10, 11, 0, tzinfo=timezone(timedelta(hours=1)))
        assert as_utc(local) == SLOT
        assert as_utc(local).tzinfo == timezone.utc


class TestVisitScheduling:
    """Creating visits through the API."""

    async def test_create_visit(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, notes="Bring the keys"),
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "scheduled"
        assert data["property_title"] == "Sea view apartment"
        assert data["client_name"] == "Tarek Tenant"
        assert data["client_phone"] == "+216 50 111 222"
        assert data["reminder_sent"] is False
        assert datetime.fromisoformat(data["scheduled_date"]) == SLOT

    async def test_overlapping_visit_is_rejected(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        first = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, status="confirmed"),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, start=SLOT + timedelta(minutes=30)),
            headers=agent_headers
        )

        error = assert_error(response, status.HTTP_400_BAD_REQUEST, "Scheduling conflict detected")
        assert error["code"] == "SCHEDULING_CONFLICT"
        conflicts = error["details"]["conflicts"]
        assert [conflict["id"] for conflict in conflicts] == [first.json()["id"]]
        assert conflicts[0]["client_name"] == "Tarek Tenant"

    async def test_back_to_back_visits_conflict(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, start=SLOT + timedelta(minutes=60)),
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Scheduling conflict detected")

    async def test_later_slot_is_free(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, start=SLOT + timedelta(minutes=61)),
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_201_CREATED

    async def test_cancelled_visit_never_conflicts(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, status="cancelled"),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant),
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_201_CREATED

    async def test_cancelled_visit_can_take_booked_slot(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, status="confirmed"),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, status="cancelled"),
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_201_CREATED

    async def test_other_property_same_slot(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client,
        property_repository
    ):
        other = await PropertyFactory.create_property(property_repository)
        await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant),
            headers=agent_headers
        )

        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(other, test_tenant),
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_201_CREATED

    async def test_unknown_references(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/calendar",
            json={
                "property_id": "00000000-0000-0000-0000-000000000000",
                "client_id": "00000000-0000-0000-0000-000000000001",
                "scheduled_date": SLOT.isoformat(),
                "type": "first_viewing",
            },
            headers=agent_headers
        )

        error = assert_error(response, status.HTTP_400_BAD_REQUEST, "Invalid visit references")
        assert {detail["field"] for detail in error["details"]} == {"property_id", "client_id"}

    async def test_duration_bounds(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(test_property, test_tenant, duration=5),
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST)

    async def test_service_raises_conflict(
        self,
        calendar_service: CalendarService,
        test_property: Property,
        test_tenant: Client,
        test_agent
    ):
        visit_data = VisitCreate(
            property_id=test_property.id,
            client_id=test_tenant.id,
            scheduled_date=SLOT,
            type="first_viewing"
        )
        await calendar_service.create_visit(visit_data, test_agent)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await calendar_service.check_conflicts(test_property.id, SLOT + timedelta(minutes=59), 30)
        assert len(exc_info.value.conflicts) == 1

    async def test_every_conflict_is_reported(
        self,
        db_session: AsyncSession,
        test_property: Property,
        test_tenant: Client
    ):
        visit_repo = VisitRepository(db_session)
        await visit_repo.bulk_create([
            {
                "property_id": test_property.id,
                "client_id": test_tenant.id,
                "scheduled_date": SLOT + timedelta(seconds=i),
                "duration": 60,
                "status": VisitStatus.CONFIRMED,
                "type": VisitType.FIRST_VIEWING,
            }
            for i in range(1001)
        ])

        conflicts = await visit_repo.find_conflicts(test_property.id, SLOT, SLOT + timedelta(minutes=60))
        assert len(conflicts) == 1001


class TestVisitUpdates:
    """Moving, cancelling and deleting visits."""

    async def create(self, async_client, headers, property_obj, client, start=SLOT, **overrides):
        response = await async_client.post(
            "/api/calendar",
            json=visit_payload(property_obj, client, start=start, **overrides),
            headers=headers
        )
        assert response.status_code == status.HTTP_201_CREATED, response.text
        return response.json()

    async def test_move_visit_within_own_slot(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        visit = await self.create(async_client, agent_headers, test_property, test_tenant)

        response = await async_client.put(
            f"/api/calendar/{visit['id']}",
            json={"scheduled_date": (SLOT + timedelta(minutes=15)).isoformat(), "duration": 90},
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["duration"] == 90

    async def test_move_onto_another_visit(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await self.create(async_client, agent_headers, test_property, test_tenant)
        later = await self.create(
            async_client, agent_headers, test_property, test_tenant, start=SLOT + timedelta(hours=3)
        )

        response = await async_client.put(
            f"/api/calendar/{later['id']}",
            json={"scheduled_date": (SLOT + timedelta(minutes=30)).isoformat()},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Scheduling conflict detected")

    async def test_reactivating_into_taken_slot(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        cancelled = await self.create(
            async_client, agent_headers, test_property, test_tenant, status="cancelled"
        )
        await self.create(async_client, agent_headers, test_property, test_tenant)

        response = await async_client.put(
            f"/api/calendar/{cancelled['id']}",
            json={"status": "confirmed"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Scheduling conflict detected")

    async def test_complete_visit_with_outcome(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        visit = await self.create(async_client, agent_headers, test_property, test_tenant)

        response = await async_client.put(
            f"/api/calendar/{visit['id']}",
            json={"status": "completed", "outcome": "very_interested", "notes": "Loved the terrace"},
            headers=agent_headers
        )

        data = response.json()
        assert data["status"] == "completed"
        assert data["outcome"] == "very_interested"

    async def test_list_visits_by_window(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await self.create(async_client, agent_headers, test_property, test_tenant)
        await self.create(
            async_client, agent_headers, test_property, test_tenant, start=SLOT + timedelta(days=7)
        )

        response = await async_client.get(
            "/api/calendar",
            params={
                "start_date": (SLOT - timedelta(days=1)).isoformat(),
                "end_date": (SLOT + timedelta(days=1)).isoformat(),
            },
            headers=agent_headers
        )

        data = response.json()
        assert data["total"] == 1
        assert datetime.fromisoformat(data["visits"][0]["scheduled_date"]) == SLOT

    async def test_list_visits_by_status(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        await self.create(async_client, agent_headers, test_property, test_tenant, status="cancelled")
        await self.create(async_client, agent_headers, test_property, test_tenant)

        response = await async_client.get(
            "/api/calendar",
            params={"status": "cancelled"},
            headers=agent_headers
        )
        assert response.json()["total"] == 1

    async def test_delete_visit(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_property: Property,
        test_tenant: Client
    ):
        visit = await self.create(async_client, agent_headers, test_property, test_tenant)

        response = await async_client.delete(f"/api/calendar/{visit['id']}", headers=agent_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await async_client.get(f"/api/calendar/{visit['id']}", headers=agent_headers)
        assert_error(response, status.HTTP_404_NOT_FOUND, "Visit not found")
