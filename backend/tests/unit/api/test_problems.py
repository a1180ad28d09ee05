"""
API Tests for problem statement endpoints
"""
import pytest
from httpx import AsyncClient

PROBLEMS_URL = "/api/v1/problems"


def problem_body(**overrides) -> dict:
    body = {
        "title": "Attendance via Face Recognition",
        "abstract": "Build a classroom attendance system that recognises students from a camera feed in real time.",
        "domain": "AI & Machine Learning",
        "category": "Major",
        "difficulty": "Advanced",
        "duration": "12 weeks",
        "technologies": ["Python", "OpenCV"],
        "deliverables": ["Source code", "Report"],
        "learningOutcomes": ["Computer vision"],
        "status": "Active",
    }
    body.update(overrides)
    return body


class TestCreateProblem:
    """Test POST /problems"""

    @pytest.mark.asyncio
    async def test_faculty_creates_problem(self, client: AsyncClient, faculty_user, faculty_auth_headers):
        response = await client.post(PROBLEMS_URL, json=problem_body(), headers=faculty_auth_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["customId"] == "AIM001"
        assert data["learningOutcomes"] == ["Computer vision"]
        assert data["viewCount"] == 0
        assert data["createdBy"]["email"] == faculty_user.email

    @pytest.mark.asyncio
    async def test_sequential_identifiers(self, client: AsyncClient, faculty_auth_headers):
        ids = []
        for _ in range(3):
            response = await client.post(PROBLEMS_URL, json=problem_body(), headers=faculty_auth_headers)
            ids.append(response.json()["data"]["customId"])

        assert ids == ["AIM001", "AIM002", "AIM003"]

    @pytest.mark.asyncio
    async def test_supplied_identifier_kept(self, client: AsyncClient, admin_auth_headers):
        response = await client.post(PROBLEMS_URL, json=problem_body(customId="aim042"), headers=admin_auth_headers)

        assert response.json()["data"]["customId"] == "AIM042"

    @pytest.mark.asyncio
    async def test_duplicate_supplied_identifier_conflict(self, client: AsyncClient, admin_auth_headers):
        await client.post(PROBLEMS_URL, json=problem_body(customId="AIM042"), headers=admin_auth_headers)

        response = await client.post(PROBLEMS_URL, json=problem_body(customId="AIM042"), headers=admin_auth_headers)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_IDENTIFIER"

    @pytest.mark.asyncio
    async def test_student_cannot_create(self, client: AsyncClient, auth_headers):
        response = await client.post(PROBLEMS_URL, json=problem_body(), headers=auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post(PROBLEMS_URL, json=problem_body())

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_body_rejected(self, client: AsyncClient, faculty_auth_headers):
        response = await client.post(
            PROBLEMS_URL, json=problem_body(abstract="Too short", domain="Space"), headers=faculty_auth_headers
        )

        assert response.status_code == 422


class TestReadProblems:
    """Test catalog reads"""

    @pytest.mark.asyncio
    async def test_list_with_filters(self, client: AsyncClient, make_problem):
        await make_problem(difficulty="Beginner")
        await make_problem(difficulty="Advanced")

        response = await client.get(PROBLEMS_URL, params={"difficulty": "Beginner"})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 1
        assert body["count"] == 1
        assert body["pages"] == 1
        assert body["data"][0]["difficulty"] == "Beginner"

    @pytest.mark.asyncio
    async def test_list_pagination(self, client: AsyncClient, make_problem):
        for _ in range(3):
            await make_problem()

        response = await client.get(PROBLEMS_URL, params={"page": 2, "limit": 2})

        body = response.json()
        assert body["page"] == 2
        assert body["pages"] == 2
        assert body["count"] == 1

    @pytest.mark.asyncio
    async def test_get_by_custom_id_counts_views(self, client: AsyncClient, make_problem):
        await make_problem()

        await client.get(f"{PROBLEMS_URL}/custom/iot001")
        response = await client.get(f"{PROBLEMS_URL}/custom/IOT001")

        assert response.status_code == 200
        assert response.json()["data"]["viewCount"] == 2

    @pytest.mark.asyncio
    async def test_unknown_custom_id_404(self, client: AsyncClient):
        response = await client.get(f"{PROBLEMS_URL}/custom/AIM999")

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_get_by_id(self, client: AsyncClient, make_problem):
        problem = await make_problem()

        response = await client.get(f"{PROBLEMS_URL}/{problem.id}")

        assert response.json()["data"]["customId"] == problem.custom_id

    @pytest.mark.asyncio
    async def test_domain_slug(self, client: AsyncClient, make_problem):
        await make_problem(domain="Data Science & Analytics")

        response = await client.get(f"{PROBLEMS_URL}/domain/Data-Science-&-Analytics")

        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, make_problem):
        await make_problem(title="Crop Disease Detector")
        await make_problem(title="Canteen Queue Display")

        response = await client.get(f"{PROBLEMS_URL}/search", params={"q": "crop"})

        assert [p["title"] for p in response.json()["data"]] == ["Crop Disease Detector"]

    @pytest.mark.asyncio
    async def test_featured(self, client: AsyncClient, make_problem):
        await make_problem(featured=True)
        await make_problem()

        response = await client.get(f"{PROBLEMS_URL}/featured")

        assert response.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_stats_admin_only(self, client: AsyncClient, make_problem, admin_auth_headers, faculty_auth_headers):
        await make_problem()

        assert (await client.get(f"{PROBLEMS_URL}/stats", headers=faculty_auth_headers)).status_code == 403

        response = await client.get(f"{PROBLEMS_URL}/stats", headers=admin_auth_headers)
        assert response.json()["data"]["overview"]["total"] == 1


class TestModifyProblems:
    """Test updates, status changes and deletion"""

    @pytest.mark.asyncio
    async def test_owner_updates(self, client: AsyncClient, make_problem, faculty_auth_headers):
        problem = await make_problem()

        response = await client.put(
            f"{PROBLEMS_URL}/{problem.id}", json={"title": "Renamed Project Title"}, headers=faculty_auth_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed Project Title"
        assert response.json()["data"]["customId"] == problem.custom_id

    @pytest.mark.asyncio
    async def test_other_user_cannot_update(self, client: AsyncClient, make_problem, auth_headers):
        problem = await make_problem()

        response = await client.put(
            f"{PROBLEMS_URL}/{problem.id}", json={"title": "Renamed Project Title"}, headers=auth_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_status(self, client: AsyncClient, make_problem, admin_auth_headers):
        problem = await make_problem(status="Draft")

        response = await client.put(
            f"{PROBLEMS_URL}/{problem.id}/status", json={"status": "Active"}, headers=admin_auth_headers
        )

        assert response.json()["message"] == "Problem status updated to Active"

    @pytest.mark.asyncio
    async def test_invalid_status_422(self, client: AsyncClient, make_problem, admin_auth_headers):
        problem = await make_problem()

        response = await client.put(
            f"{PROBLEMS_URL}/{problem.id}/status", json={"status": "Published"}, headers=admin_auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_toggle_featured(self, client: AsyncClient, make_problem, admin_auth_headers):
        problem = await make_problem()

        response = await client.put(f"{PROBLEMS_URL}/{problem.id}/featured", headers=admin_auth_headers)

        assert response.json()["data"]["featured"] is True

    @pytest.mark.asyncio
    async def test_delete_admin_only(self, client: AsyncClient, make_problem, faculty_auth_headers, admin_auth_headers):
        problem = await make_problem()

        forbidden = await client.delete(f"{PROBLEMS_URL}/{problem.id}", headers=faculty_auth_headers)
        assert forbidden.status_code == 403

        response = await client.delete(f"{PROBLEMS_URL}/{problem.id}", headers=admin_auth_headers)
        assert response.status_code == 200
        assert (await client.get(f"{PROBLEMS_URL}/{problem.id}")).status_code == 404
