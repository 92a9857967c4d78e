"""Tests for workout templates API and exercise catalog."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_template_keeps_order(client: AsyncClient, auth_headers: dict, exercises):
    ex1, ex2 = exercises
    resp = await client.post(
        "/api/v1/workouts",
        json={
            "name": "Push Legs",
            "exercises": [
                {"exerciseId": ex2, "sets": 3, "reps": 12, "restTime": 45},
                {"exercise_id": ex1, "sets": 5, "reps": 5, "notes": "Heavy"},
            ],
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["name"] == "Push Legs"
    assert data["source"] == "manual"
    assert [(e["exercise_id"], e["order"]) for e in data["exercises"]] == [(ex2, 0), (ex1, 1)]
    assert data["exercises"][0]["rest_time"] == 45
    assert data["exercises"][1]["rest_time"] == 60


@pytest.mark.asyncio
async def test_create_template_unknown_exercise(client: AsyncClient, auth_headers: dict, exercises):
    resp = await client.post(
        "/api/v1/workouts",
        json={"name": "Broken", "exercises": [{"exerciseId": 999999, "sets": 3, "reps": 10}]},
        headers=auth_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_template_requires_exercises(client: AsyncClient, auth_headers: dict):
    resp = await client.post("/api/v1/workouts", json={"name": "Empty", "exercises": []}, headers=auth_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_and_get_templates_are_scoped_to_user(
    client: AsyncClient, auth_headers: dict, other_headers: dict, exercises
):
    ex1, _ = exercises
    create = await client.post(
        "/api/v1/workouts",
        json={"name": "Mine", "exercises": [{"exerciseId": ex1, "sets": 3, "reps": 8}]},
        headers=auth_headers,
    )
    template_id = create.json()["id"]

    mine = (await client.get("/api/v1/workouts", headers=auth_headers)).json()
    assert mine["total"] == 1
    assert mine["items"][0]["name"] == "Mine"
    theirs = (await client.get("/api/v1/workouts", headers=other_headers)).json()
    assert theirs["total"] == 0

    assert (await client.get(f"/api/v1/workouts/{template_id}", headers=auth_headers)).status_code == 200
    assert (await client.get(f"/api/v1/workouts/{template_id}", headers=other_headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_exercises(client: AsyncClient, auth_headers: dict, exercises):
    resp = await client.get("/api/v1/exercises", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [e["name"] for e in data["items"]] == ["Barbell Squat", "Push Up"]

    resp = await client.get("/api/v1/exercises?body_part=Chest", headers=auth_headers)
    assert [e["name"] for e in resp.json()["items"]] == ["Push Up"]


@pytest.mark.asyncio
async def test_get_exercise(client: AsyncClient, auth_headers: dict, exercises):
    ex1, _ = exercises
    resp = await client.get(f"/api/v1/exercises/{ex1}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["target"] == "quads"
    assert (await client.get("/api/v1/exercises/999999", headers=auth_headers)).status_code == 404
