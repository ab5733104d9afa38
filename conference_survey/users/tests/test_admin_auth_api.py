from http import HTTPStatus

import pytest
from django.urls import reverse
from rest_framework_simplejwt.tokens import AccessToken

from tests.permissions.factories import TEST_PASSWORD
from tests.permissions.factories import authed_client

pytestmark = pytest.mark.django_db


def test_register_returns_token_and_admin(api_client):
    response = api_client.post(
        reverse("api:admin-auth-register"),
        {"email": "New@Example.com", "password": "Sturdy-Pass-99", "name": "Nia"},
        format="json",
    )
    assert response.status_code == HTTPStatus.CREATED, response.data
    assert response.data["admin"]["email"] == "new@example.com"
    token = AccessToken(response.data["token"])
    assert token["type"] == "admin"
    assert token["email"] == "new@example.com"


def test_register_duplicate_email_conflicts(api_client, organiser):
    response = api_client.post(
        reverse("api:admin-auth-register"),
        {"email": "ORGANISER@example.com", "password": "Sturdy-Pass-99"},
        format="json",
    )
    assert response.status_code == HTTPStatus.CONFLICT


def test_register_rejects_short_password(api_client):
    response = api_client.post(
        reverse("api:admin-auth-register"),
        {"email": "short@example.com", "password": "abc"},
        format="json",
    )
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "password" in response.data


def test_login_ok(api_client, organiser):
    response = api_client.post(
        reverse("api:admin-auth-login"),
        {"email": organiser.email, "password": TEST_PASSWORD},
        format="json",
    )
    assert response.status_code == HTTPStatus.OK
    assert response.data["admin"]["id"] == organiser.id


def test_login_bad_password_is_401(api_client, organiser):
    response = api_client.post(
        reverse("api:admin-auth-login"),
        {"email": organiser.email, "password": "wrong-password"},
        format="json",
    )
    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.data["detail"] == "Invalid credentials."


def test_me(organiser_client, organiser):
    response = organiser_client.get(reverse("api:admin-auth-me"))
    assert response.status_code == HTTPStatus.OK
    assert response.data["email"] == organiser.email


def test_me_rejects_attendee_token(attendee_client):
    response = attendee_client.get(reverse("api:admin-auth-me"))
    assert response.status_code == HTTPStatus.FORBIDDEN


def test_login_ignores_stale_bearer_header(organiser):
    client = authed_client("not-a-valid-token")
    response = client.post(
        reverse("api:admin-auth-login"),
        {"email": organiser.email, "password": TEST_PASSWORD},
        format="json",
    )
    assert response.status_code == HTTPStatus.OK


def test_me_still_requires_a_valid_token():
    response = authed_client("not-a-valid-token").get(reverse("api:admin-auth-me"))
    assert response.status_code == HTTPStatus.UNAUTHORIZED
