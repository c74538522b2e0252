from datetime import time
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models.appointment import Appointment, AppointmentStatus
from app.models.business import Business
from tests.conftest import get_auth_headers


@pytest.fixture
def admin_headers():
    return get_auth_headers("platform-admin", role="admin")


class TestAdminAuth:
    @pytest.mark.asyncio
    async def test_business_token_refused(self, client: AsyncClient, sample_business):
        response = await client.get(
            "/api/admin/stats", headers=get_auth_headers(str(sample_business.uuid))
        )

        assert response.status_code == 403


class TestAdminBusinessesAPI:
    @pytest.mark.asyncio
    async def test_list(self, client: AsyncClient, admin_headers, sample_business, other_business):
        response = await client.get("/api/admin/businesses", headers=admin_headers)

        assert response.status_code == 200
        assert {b["business_name"] for b in response.json()} == {"Test Salon", "Other Salon"}

    @pytest.mark.asyncio
    async def test_delete(
        self, client: AsyncClient, db, admin_headers, sample_business, sample_lead, make_appointment
    ):
        await make_appointment(time(10, 0))

        response = await client.delete(
            f"/api/admin/businesses/{sample_business.uuid}", headers=admin_headers
        )

        assert response.status_code == 204
        assert await db.scalar(select(func.count(Business.id))) == 0
        assert await db.scalar(select(func.count(Appointment.id))) == 0

        profile = await client.get(f"/api/customer/business/{sample_business.uuid}")
        assert profile.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client: AsyncClient, admin_headers):
        response = await client.delete(f"/api/admin/businesses/{uuid4()}", headers=admin_headers)

        assert response.status_code == 404


class TestAdminLeadsAPI:
    @pytest.mark.asyncio
    async def test_list_and_filter(self, client: AsyncClient, admin_headers, sample_lead):
        everything = await client.get("/api/admin/leads", headers=admin_headers)
        converted = await client.get("/api/admin/leads?status=converted", headers=admin_headers)

        assert [lead["id"] for lead in everything.json()] == [sample_lead.id]
        assert converted.json() == []

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, admin_headers, sample_lead):
        response = await client.put(
            f"/api/admin/leads/{sample_lead.id}",
            headers=admin_headers,
            json={"status": "contacted", "notes": "Left voicemail"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "contacted"
        assert data["notes"] == "Left voicemail"
        assert data["last_contacted"] is not None

    @pytest.mark.asyncio
    async def test_update_unknown(self, client: AsyncClient, admin_headers):
        response = await client.put(
            "/api/admin/leads/999", headers=admin_headers, json={"status": "lost"}
        )

        assert response.status_code == 404


class TestAdminAppointmentsAPI:
    @pytest.mark.asyncio
    async def test_list_across_businesses(
        self, client: AsyncClient, admin_headers, sample_business, make_appointment
    ):
        await make_appointment(time(9, 0), status=AppointmentStatus.PENDING)
        await make_appointment(time(11, 0), status=AppointmentStatus.CANCELLED)

        everything = await client.get("/api/admin/appointments", headers=admin_headers)
        cancelled = await client.get(
            "/api/admin/appointments?status=cancelled", headers=admin_headers
        )

        assert len(everything.json()) == 2
        assert everything.json()[0]["appointment_time"] == "11:00"
        assert everything.json()[0]["business"]["uuid"] == str(sample_business.uuid)
        assert [a["status"] for a in cancelled.json()] == ["cancelled"]

    @pytest.mark.asyncio
    async def test_update_status(self, client: AsyncClient, admin_headers, make_appointment):
        appointment = await make_appointment(time(9, 0), status=AppointmentStatus.CONFIRMED)

        response = await client.put(
            f"/api/admin/appointments/{appointment.uuid}/status",
            headers=admin_headers,
            json={"status": "completed"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    @pytest.mark.asyncio
    async def test_terminal_status_is_final(
        self, client: AsyncClient, admin_headers, make_appointment
    ):
        appointment = await make_appointment(time(9, 0), status=AppointmentStatus.COMPLETED)

        response = await client.put(
            f"/api/admin/appointments/{appointment.uuid}/status",
            headers=admin_headers,
            json={"status": "cancelled"},
        )

        assert response.status_code == 400


class TestAdminStatsAPI:
    @pytest.mark.asyncio
    async def test_stats(
        self, client: AsyncClient, admin_headers, sample_lead, make_appointment
    ):
        await make_appointment(time(9, 0), status=AppointmentStatus.COMPLETED)
        await make_appointment(time(11, 0), status=AppointmentStatus.PENDING)

        response = await client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_businesses"] == 1
        assert data["total_appointments"] == 2
        assert data["total_leads"] == 1
        assert data["new_leads"] == 1
        assert float(data["total_revenue"]) == 50.0
