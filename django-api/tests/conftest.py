"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from studios.models import ClassType, Client, Location, Studio, Teacher


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def studio(db) -> Studio:
    return Studio.objects.create(name="Flow Pilates", timezone="UTC")


@pytest.fixture
def other_studio(db) -> Studio:
    return Studio.objects.create(name="Elsewhere Yoga", timezone="UTC")


@pytest.fixture
def teacher(studio) -> Teacher:
    return Teacher.objects.create(studio=studio, first_name="Maya", last_name="Lopez")


@pytest.fixture
def second_teacher(studio) -> Teacher:
    return Teacher.objects.create(studio=studio, first_name="Jon", last_name="Park")


@pytest.fixture
def location(studio) -> Location:
    return Location.objects.create(studio=studio, name="Studio A")


@pytest.fixture
def second_location(studio) -> Location:
    return Location.objects.create(studio=studio, name="Studio B")


@pytest.fixture
def class_type(studio) -> ClassType:
    return ClassType.objects.create(studio=studio, name="Reformer", duration_minutes=60)


@pytest.fixture
def client_record(studio) -> Client:
    return Client.objects.create(
        studio=studio, first_name="Ana", last_name="Silva", email="ana@example.com", phone="+15551230000"
    )


@pytest.fixture
def studio_client(studio) -> APIClient:
    """API client scoped to ``studio`` through the X-Studio-Id header."""
    client = APIClient()
    client.credentials(HTTP_X_STUDIO_ID=str(studio.id))
    return client
