"""Shared fixtures for family graph tests."""

import pytest
from fastapi.testclient import TestClient

from family_graph.main import app
from family_graph.models.person_model import Person


def make_person(id, name=None, **fields) -> Person:
    """Build a Person with relational fields defaulting to none."""
    return Person(id=id, familyId=1, name=name or f"Person {id}", **fields)


@pytest.fixture
def chain():
    """Five generations, ids 1..5, each the only child of the previous one."""
    return [make_person(1, "Gen One")] + [
        make_person(i, f"Gen {i}", parent=i - 1) for i in range(2, 6)
    ]


@pytest.fixture
def nuclear_family():
    """Married parents 1 and 2 with children 3 and 4."""
    return [
        make_person(1, "Ana Horvat", spouse=2),
        make_person(2, "Bero Horvat", spouse=1),
        make_person(3, "Ceda Horvat", parent=1, parent2=2, birthYear="1980"),
        make_person(4, "Dina Horvat", parent=1, parent2=2, birthYear="1975"),
    ]


@pytest.fixture
def client():
    # Entering the context runs the lifespan hook, which gives each test a fresh store
    with TestClient(app) as c:
        yield c


@pytest.fixture
def family(client):
    response = client.post("/api/v1/families", json={"name": "Horvat"})
    assert response.status_code == 201
    return response.json()
