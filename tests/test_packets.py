"""Tests for packet content selection and the packet lifecycle."""
import pytest

from wellness_portal.errors import ConflictError, NotFoundError, ValidationError
from wellness_portal.models import PacketStatus, PacketType, Population, Role
from wellness_portal.services import (
    create_draft_packet,
    generate_packet_content,
    packet_type_for_population,
    publish_packet,
    save_module_to_profile,
)


@pytest.mark.parametrize(
    "population, expected",
    [
        (Population.ATHLETE, PacketType.ATHLETE_PERFORMANCE),
        ("pregnancy", PacketType.PREGNANCY),
        (Population.CHRONIC_CONDITION, PacketType.GENERAL),
        (None, PacketType.GENERAL),
    ],
)
def test_packet_type_for_population(population, expected) -> None:
    assert packet_type_for_population(population) == expected


def test_content_respects_equipment_and_allergies(make_user, library) -> None:
    user = make_user(population=Population.GENERAL, first_name="Jo", last_name="Park")
    save_module_to_profile(user.id, "equipment", {"equipment_access": ["Dumbbells"]})
    save_module_to_profile(user.id, "dietary", {"food_allergies": ["Peanuts"]})

    content = generate_packet_content(user.id)
    assert content["header"]["client_name"] == "Jo Park"
    assert content["header"]["population"] == "general"
    assert content["header"]["packet_type"] == "general"
    assert content["header"]["version"] == 1
    exercise_names = [item["name"] for item in content["exercises"]]
    assert sorted(exercise_names) == ["Bodyweight Squat", "Glute Bridge", "Goblet Squat"]
    assert [item["name"] for item in content["nutrition"]] == ["Lentil Soup", "Tuna Salad"]
    assert content["profile"]["attributes"]["dietary"]["allergies"] == ["Peanuts"]


def test_unknown_equipment_allows_everything(make_user, library) -> None:
    user = make_user(population=Population.ATHLETE)
    save_module_to_profile(user.id, "movement", {"fitness_level": "Advanced"})
    content = generate_packet_content(user.id)
    names = [item["name"] for item in content["exercises"]]
    assert names[0] == "Barbell Deadlift"
    assert set(names) == {"Barbell Deadlift", "Bodyweight Squat", "Goblet Squat"}


def test_bodyweight_only_clients_get_bodyweight_items(make_user, library) -> None:
    user = make_user(population=Population.GENERAL)
    save_module_to_profile(user.id, "equipment", {"equipment_access": ["None (bodyweight only)"]})
    names = {item["name"] for item in generate_packet_content(user.id)["exercises"]}
    assert names == {"Bodyweight Squat", "Glute Bridge"}


def test_contraindicated_items_are_excluded(make_user, library) -> None:
    user = make_user(population=Population.PREGNANCY)
    content = generate_packet_content(user.id)
    assert [item["name"] for item in content["exercises"]] == ["Bodyweight Squat"]
    assert [item["name"] for item in content["nutrition"]] == ["Lentil Soup"]


def test_packet_types_omit_sections(make_user, library) -> None:
    user = make_user(population=Population.GENERAL)
    nutrition = generate_packet_content(user.id, "nutrition")
    assert "exercises" not in nutrition and "nutrition" in nutrition
    training = generate_packet_content(user.id, PacketType.TRAINING)
    assert "nutrition" not in training and "exercises" in training
    with pytest.raises(ValidationError):
        generate_packet_content(user.id, "brochure")


def test_draft_and_publish(make_user, library) -> None:
    user = make_user(population=Population.GENERAL)
    packet = create_draft_packet(user.id)
    assert packet.status == PacketStatus.DRAFT
    assert packet.version == 1
    assert packet.packet_type == PacketType.GENERAL
    assert create_draft_packet(user.id).version == 2

    published = publish_packet(packet.id)
    assert published.status == PacketStatus.PUBLISHED
    assert published.published_at is not None
    with pytest.raises(ConflictError):
        publish_packet(packet.id)
    with pytest.raises(NotFoundError):
        publish_packet(9999)


def test_packet_routes(client, make_user, auth_headers, library) -> None:
    admin = make_user(role=Role.ADMIN)
    owner = make_user(population=Population.GENERAL)
    other = make_user(population=Population.GENERAL)

    url = f"/api/clients/{owner.id}/packets"
    assert client.post(url, json={}, headers=auth_headers(owner)).status_code == 403
    response = client.post(url, json={"packet_type": "nutrition"}, headers=auth_headers(admin))
    assert response.status_code == 201
    packet = response.get_json()
    assert packet["status"] == "draft"
    assert packet["packet_type"] == "nutrition"

    # drafts are hidden from the client
    assert client.get(url, headers=auth_headers(owner)).get_json() == []
    assert client.get(f"/api/packets/{packet['id']}", headers=auth_headers(owner)).status_code == 404

    response = client.post(f"/api/packets/{packet['id']}/publish", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.get_json()["status"] == "published"
    assert len(client.get(url, headers=auth_headers(owner)).get_json()) == 1
    assert client.get(f"/api/packets/{packet['id']}", headers=auth_headers(owner)).status_code == 200
    assert client.get(f"/api/packets/{packet['id']}", headers=auth_headers(other)).status_code == 403
    assert client.post(f"/api/packets/{packet['id']}/publish", headers=auth_headers(admin)).status_code == 409


def test_library_routes(client, make_user, auth_headers, library) -> None:
    admin = make_user(role=Role.ADMIN)
    user = make_user()
    response = client.get("/api/library/exercises?population=pregnancy", headers=auth_headers(user))
    assert [item["name"] for item in response.get_json()] == ["Bodyweight Squat"]

    payload = {"name": "Plank", "category": "Core", "populations": ["general"]}
    assert client.post("/api/library/exercises", json=payload, headers=auth_headers(user)).status_code == 403
    response = client.post("/api/library/exercises", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.get_json()["difficulty"] == "Beginner"
    assert client.post("/api/library/exercises", json=payload, headers=auth_headers(admin)).status_code == 409

    bad = {"name": "Mystery Stew", "category": "Dinner", "populations": ["martian"]}
    assert client.post("/api/library/nutrition", json=bad, headers=auth_headers(admin)).status_code == 400
