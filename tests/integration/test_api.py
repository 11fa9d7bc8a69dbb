"""End-to-end tests of the HTTP API over the test database."""

import pytest
from httpx import AsyncClient


def slot_body(catalog, **overrides):
    body = {
        "degree_id": "2bac",
        "subject_id": catalog.math.id,
        "teacher_id": catalog.teacher.id,
        "day_of_week": 1,
        "starts_at": "08:00",
        "ends_at": "09:00",
    }
    body.update(overrides)
    return body


def plan_body(catalog, **overrides):
    body = {
        "plan_date": "2025-09-10",
        "degree_id": "3eme",
        "subject_id": catalog.math.id,
        "title": "Théorème de Thalès",
    }
    body.update(overrides)
    return body


class TestTimetablesAPI:
    """/timetables endpoints."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, api_client: AsyncClient, catalog):
        """Test: POST creates a slot (aliases accepted) and GET returns it."""
        # Act
        response = await api_client.post("/timetables", json=slot_body(catalog))

        # Assert
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["degree_id"] == catalog.degrees["bac2"].id
        assert data["start_time"] == "08:00"
        assert data["end_time"] == "09:00"
        assert data["title"] == "Mathematique — Lun 08:00–09:00 — Amina Idrissi"
        assert data["teacher"] == {
            "id": catalog.teacher.id,
            "firstname": "Amina",
            "lastname": "Idrissi",
        }

        fetched = await api_client.get(f"/timetables/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["data"]["title"] == data["title"]

    @pytest.mark.asyncio
    async def test_create_rejects_end_before_start(self, api_client: AsyncClient, catalog):
        """Test: An inverted time pair is a 422 naming end_time."""
        response = await api_client.post(
            "/timetables", json=slot_body(catalog, starts_at="10:00", ends_at="09:00")
        )

        assert response.status_code == 422
        assert "end_time" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_degree(self, api_client: AsyncClient, catalog):
        """Test: Unknown degree aliases are a 422 naming degree_id."""
        response = await api_client.post(
            "/timetables", json=slot_body(catalog, degree_id="licence")
        )

        assert response.status_code == 422
        assert "degree_id" in response.json()["errors"]

    @pytest.mark.asyncio
    async def test_create_rejects_missing_subject(self, api_client: AsyncClient, catalog):
        """Test: A missing subject is a 422 with the offending field."""
        response = await api_client.post(
            "/timetables", json=slot_body(catalog, subject_id=9999)
        )

        assert response.status_code == 422
        assert response.json()["field"] == "subject_id"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, api_client: AsyncClient, catalog):
        """Test: PATCH and PUT merge partial bodies; DELETE removes the slot."""
        created = (await api_client.post("/timetables", json=slot_body(catalog))).json()
        slot_id = created["data"]["id"]

        patched = await api_client.patch(
            f"/timetables/{slot_id}", json={"room_id": catalog.room.id}
        )
        put = await api_client.put(f"/timetables/{slot_id}", json={"ends_at": "10:00"})

        assert patched.status_code == 200
        assert patched.json()["data"]["room"]["name"] == "Salle B12"
        assert put.status_code == 200
        assert put.json()["data"]["end_time"] == "10:00"
        assert put.json()["data"]["room_id"] == catalog.room.id

        assert (await api_client.delete(f"/timetables/{slot_id}")).status_code == 204
        missing = await api_client.get(f"/timetables/{slot_id}")
        assert missing.status_code == 404
        assert missing.json()["model"] == "WeeklySlot"

    @pytest.mark.asyncio
    async def test_list_pages_in_grid_order(self, api_client: AsyncClient, catalog):
        """Test: Listing is ordered by time of day and paginated."""
        for start, end in (("10:00", "11:00"), ("08:00", "09:00"), ("14:00", "15:00")):
            await api_client.post(
                "/timetables", json=slot_body(catalog, starts_at=start, ends_at=end)
            )

        first = await api_client.get("/timetables", params={"degree_id": "bac2", "per_page": 2})
        second = await api_client.get(
            "/timetables", params={"degree_id": "bac2", "per_page": 2, "page": 2}
        )

        assert [s["start_time"] for s in first.json()["data"]] == ["08:00", "10:00"]
        assert first.json()["meta"]["total"] == 3
        assert first.json()["meta"]["has_next"] is True
        assert [s["start_time"] for s in second.json()["data"]] == ["14:00"]

    @pytest.mark.asyncio
    async def test_list_rejects_unknown_degree(self, api_client: AsyncClient, catalog):
        """Test: Filtering on an unknown degree is a 422."""
        response = await api_client.get("/timetables", params={"degree_id": "licence"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_conflicts(self, api_client: AsyncClient, catalog):
        """Test: Overlapping slots in the same room are reported, not refused."""
        first = await api_client.post(
            "/timetables", json=slot_body(catalog, room_id=catalog.room.id)
        )
        second = await api_client.post(
            "/timetables",
            json=slot_body(
                catalog,
                degree_id="TC",
                teacher_id=catalog.other_teacher.id,
                room_id=catalog.room.id,
                starts_at="08:30",
                ends_at="09:30",
            ),
        )
        assert first.status_code == second.status_code == 201

        response = await api_client.get("/timetables/conflicts")

        assert response.status_code == 200
        conflicts = response.json()["data"]
        assert len(conflicts) == 1
        assert conflicts[0]["reasons"] == ["room"]


class TestMonthlyPlansAPI:
    """/monthly-plans endpoints."""

    @pytest.mark.asyncio
    async def test_post_is_an_upsert(self, api_client: AsyncClient, catalog):
        """Test: Omitting sequence appends; giving it updates in place."""
        # Act
        first = await api_client.post("/monthly-plans", json=plan_body(catalog))
        second = await api_client.post("/monthly-plans", json=plan_body(catalog))
        updated = await api_client.post(
            "/monthly-plans", json=plan_body(catalog, sequence=1, title="Thalès (suite)")
        )

        # Assert
        assert first.status_code == second.status_code == updated.status_code == 200
        assert first.json()["data"]["sequence"] == 1
        assert second.json()["data"]["sequence"] == 2
        assert updated.json()["data"]["id"] == first.json()["data"]["id"]
        assert updated.json()["data"]["title"] == "Thalès (suite)"

        listing = await api_client.get("/monthly-plans", params={"month": "2025-09"})
        assert listing.json()["meta"]["total"] == 2

    @pytest.mark.asyncio
    async def test_teacher_alias(self, api_client: AsyncClient, catalog):
        """Test: enseignant_id is accepted for teacher_id."""
        response = await api_client.post(
            "/monthly-plans", json=plan_body(catalog, enseignant_id=catalog.teacher.id)
        )

        assert response.status_code == 200
        assert response.json()["data"]["teacher_id"] == catalog.teacher.id
        assert response.json()["data"]["plan_date"] == "2025-09-10"

    @pytest.mark.asyncio
    async def test_patch_conflict(self, api_client: AsyncClient, catalog):
        """Test: Patching onto another entry's key is a 409 carrying the key."""
        loose = (await api_client.post("/monthly-plans", json=plan_body(catalog))).json()
        await api_client.post(
            "/monthly-plans", json=plan_body(catalog, teacher_id=catalog.teacher.id)
        )

        response = await api_client.patch(
            f"/monthly-plans/{loose['data']['id']}", json={"teacher_id": catalog.teacher.id}
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Conflict"
        assert body["key"]["plan_date"] == "2025-09-10"
        assert body["key"]["teacher_id"] == catalog.teacher.id

    @pytest.mark.asyncio
    async def test_patch_null_sequence(self, api_client: AsyncClient, catalog):
        """Test: PATCH with sequence null is a 422 on sequence, and nothing is written."""
        # Arrange
        created = (await api_client.post("/monthly-plans", json=plan_body(catalog))).json()
        entry_id = created["data"]["id"]

        # Act
        response = await api_client.patch(
            f"/monthly-plans/{entry_id}", json={"sequence": None}
        )

        # Assert
        assert response.status_code == 422
        assert "sequence" in response.json()["errors"]
        stored = await api_client.get(f"/monthly-plans/{entry_id}")
        assert stored.json()["data"]["sequence"] == 1

    @pytest.mark.asyncio
    async def test_patch_and_delete(self, api_client: AsyncClient, catalog):
        """Test: PATCH updates notes; DELETE then GET is a 404."""
        created = (await api_client.post("/monthly-plans", json=plan_body(catalog))).json()
        entry_id = created["data"]["id"]

        patched = await api_client.patch(
            f"/monthly-plans/{entry_id}", json={"notes": "Exercices 1 à 5"}
        )

        assert patched.status_code == 200
        assert patched.json()["data"]["notes"] == "Exercices 1 à 5"
        assert (await api_client.delete(f"/monthly-plans/{entry_id}")).status_code == 204
        assert (await api_client.get(f"/monthly-plans/{entry_id}")).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{"month": "2025-13"}, {"month": "sept"}, {"degree_id": "licence"}],
    )
    async def test_list_rejects_bad_filters(self, api_client: AsyncClient, catalog, params):
        """Test: Malformed months and unknown degrees are 422."""
        response = await api_client.get("/monthly-plans", params=params)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_upsert_rejects_bad_sequence(self, api_client: AsyncClient, catalog):
        """Test: A non-positive sequence fails request validation."""
        response = await api_client.post("/monthly-plans", json=plan_body(catalog, sequence=0))

        assert response.status_code == 422
        assert response.json()["details"]


class TestCatalogAPI:
    """/degrees and /subjects endpoints."""

    @pytest.mark.asyncio
    async def test_degrees(self, api_client: AsyncClient, catalog):
        """Test: The five canonical degrees are listed in order."""
        response = await api_client.get("/degrees")

        assert response.status_code == 200
        assert [d["slug"] for d in response.json()][0] == "college-3eme"
        assert len(response.json()) == 5

    @pytest.mark.asyncio
    async def test_subjects(self, api_client: AsyncClient, catalog):
        """Test: Subjects can be searched by code."""
        response = await api_client.get("/subjects", params={"search": "PC"})

        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Physique & Chimie"]


class TestUserViewsAPI:
    """/users/{id}/... views."""

    @pytest.mark.asyncio
    async def test_student_and_parent_views(self, api_client: AsyncClient, catalog):
        """Test: A parent sees their child's timetable and monthly plan."""
        await api_client.post("/timetables", json=slot_body(catalog))
        await api_client.post("/monthly-plans", json=plan_body(catalog, degree_id="bac2"))

        student = await api_client.get(f"/users/{catalog.student.id}/timetable")
        parent = await api_client.get(
            f"/users/{catalog.parent.id}/monthly-plans",
            params={"child_id": catalog.student.id, "month": "2025-09"},
        )

        assert student.status_code == 200
        assert len(student.json()["data"]) == 1
        assert parent.status_code == 200
        assert [p["title"] for p in parent.json()["data"]] == ["Théorème de Thalès"]

    @pytest.mark.asyncio
    async def test_view_errors(self, api_client: AsyncClient, catalog):
        """Test: Unknown users are 404; parents without child_id are 422."""
        assert (await api_client.get("/users/9999/timetable")).status_code == 404

        response = await api_client.get(f"/users/{catalog.parent.id}/timetable")
        assert response.status_code == 422
        assert "child_id" in response.json()["errors"]
