"""
API Tests for analytics endpoints
"""
import pytest
from httpx import AsyncClient

ANALYTICS_URL = "/api/v1/analytics"


class TestDashboard:
    @pytest.mark.asyncio
    async def test_dashboard_counts(self, client: AsyncClient, make_problem, auth_headers):
        await make_problem(status="Active", featured=True)
        await make_problem(status="Draft")
        await make_problem(status="Active", domain="Cloud Computing")

        response = await client.get(f"{ANALYTICS_URL}/dashboard", headers=auth_headers)

        data = response.json()["data"]
        assert data["totalProblems"] == 3
        assert data["activeProblems"] == 2
        assert data["draftProblems"] == 1
        assert data["featuredProblems"] == 1
        assert data["recentProblems"] == 3
        assert {d["_id"]: d["count"] for d in data["problemsByDomain"]} == {
            "IoT & Embedded Systems": 1,
            "Cloud Computing": 1,
        }

    @pytest.mark.asyncio
    async def test_dashboard_requires_auth(self, client: AsyncClient):
        response = await client.get(f"{ANALYTICS_URL}/dashboard")

        assert response.status_code == 401


class TestProblemAnalytics:
    @pytest.mark.asyncio
    async def test_period_report(self, client: AsyncClient, make_problem, faculty_user, auth_headers):
        await make_problem()
        await make_problem(status="Draft")

        response = await client.get(f"{ANALYTICS_URL}/problems", params={"period": 7}, headers=auth_headers)

        data = response.json()["data"]
        assert data["period"] == 7
        assert data["totalProblems"] == 2
        assert {p["customId"] for p in data["problemsInPeriod"]} == {"IOT001", "IOT002"}
        assert data["topCreators"] == [{
            "_id": str(faculty_user.id),
            "name": faculty_user.name,
            "email": faculty_user.email,
            "count": 2,
        }]

    @pytest.mark.asyncio
    async def test_invalid_period(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{ANALYTICS_URL}/problems", params={"period": 0}, headers=auth_headers)

        assert response.status_code == 422


class TestUserAnalytics:
    @pytest.mark.asyncio
    async def test_user_report(self, client: AsyncClient, test_user, faculty_auth_headers):
        response = await client.get(f"{ANALYTICS_URL}/users", headers=faculty_auth_headers)

        data = response.json()["data"]
        assert data["totalUsers"] == 2
        assert data["activeUsers"] == 0
        assert data["inactiveUsers"] == 2
        assert data["newUsers"] == 2
        assert len(data["recentUsers"]) == 2
        assert "email" in data["recentUsers"][0]

    @pytest.mark.asyncio
    async def test_students_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{ANALYTICS_URL}/users", headers=auth_headers)

        assert response.status_code == 403
