"""Tests for population classification, catalogue and assignment."""
import logging

import pytest

from wellness_portal.errors import NotFoundError, ValidationError
from wellness_portal.models import Population, Role
from wellness_portal.services import all_populations, assign_population, classify_population, population_info


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({}, Population.GENERAL),
        ({"is_athlete": True}, Population.ATHLETE),
        ({"has_injury": True, "is_athlete": True}, Population.RECOVERY),
        ({"has_chronic_condition": True, "has_injury": True}, Population.CHRONIC_CONDITION),
        ({"age": 70, "has_chronic_condition": True}, Population.OLDER_ADULT),
        ({"age": 16, "is_athlete": True}, Population.YOUTH),
        ({"is_youth": True}, Population.YOUTH),
        ({"is_postpartum": True, "age": 15}, Population.POSTPARTUM),
        ({"is_pregnant": True, "is_postpartum": True}, Population.PREGNANCY),
        ({"age": 18}, Population.GENERAL),
        ({"age": 65}, Population.OLDER_ADULT),
    ],
)
def test_classify_population_priority(kwargs, expected) -> None:
    assert classify_population(**kwargs) == expected


def test_population_info_counts_modules() -> None:
    info = population_info(Population.ATHLETE)
    assert info["value"] == "athlete"
    assert info["name"] == "Athlete"
    assert info["required_modules"] == 3
    assert info["optional_modules"] == 2
    assert info["total_modules"] == 5


def test_all_populations_lists_every_tag() -> None:
    values = [entry["value"] for entry in all_populations()]
    assert values == [p.value for p in Population]


def test_assign_population_logs_change(make_user, caplog) -> None:
    user = make_user(population=None)
    with caplog.at_level(logging.INFO, logger="wellness_portal"):
        updated = assign_population(user.id, "athlete", notes="discovery call")
    assert updated.population == Population.ATHLETE
    assert "from none to athlete" in caplog.text

    with caplog.at_level(logging.INFO, logger="wellness_portal"):
        assign_population(user.id, Population.RECOVERY)
    assert "from athlete to recovery" in caplog.text


def test_assign_population_rejects_unknown(make_user) -> None:
    user = make_user()
    with pytest.raises(ValidationError):
        assign_population(user.id, "astronaut")
    with pytest.raises(NotFoundError):
        assign_population(9999, "general")
    admin = make_user(role=Role.ADMIN)
    with pytest.raises(NotFoundError):
        assign_population(admin.id, "general")


def test_population_routes(client, make_user, auth_headers) -> None:
    admin = make_user(role=Role.ADMIN)
    user = make_user()

    response = client.get("/api/populations", headers=auth_headers(user))
    assert response.status_code == 200
    assert len(response.get_json()) == len(Population)

    url = f"/api/clients/{user.id}/population"
    assert client.put(url, json={"population": "youth"}, headers=auth_headers(user)).status_code == 403
    assert client.put(url, json={"population": "martian"}, headers=auth_headers(admin)).status_code == 400
    response = client.put(url, json={"population": "youth"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.get_json()["population"] == "youth"

    body = client.get("/api/modules", headers=auth_headers(user)).get_json()
    assert [m["id"] for m in body["required"]] == ["youth", "dietary", "lifestyle"]


def test_classify_route(client, make_user, auth_headers) -> None:
    admin = make_user(role=Role.ADMIN)
    user = make_user()
    payload = {"age": 70}
    assert client.post("/api/populations/classify", json=payload, headers=auth_headers(user)).status_code == 403
    response = client.post("/api/populations/classify", json=payload, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.get_json()["suggested"]["value"] == "older-adult"


def test_admin_lists_clients(client, make_user, auth_headers) -> None:
    admin = make_user(role=Role.ADMIN)
    make_user(population=Population.ATHLETE)
    make_user(population=Population.GENERAL)
    response = client.get("/api/clients?population=athlete", headers=auth_headers(admin))
    assert response.status_code == 200
    assert [c["population"] for c in response.get_json()] == ["athlete"]
    all_clients = client.get("/api/clients", headers=auth_headers(admin)).get_json()
    assert len(all_clients) == 2
