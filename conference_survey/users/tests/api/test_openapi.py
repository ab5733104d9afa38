from http import HTTPStatus

import pytest
from django.urls import reverse


@pytest.mark.django_db
def test_api_docs_are_public(client):
    response = client.get(reverse("api-docs"))
    assert response.status_code == HTTPStatus.OK


@pytest.mark.django_db
def test_api_schema_generated_successfully(client):
    response = client.get(reverse("api-schema"))
    assert response.status_code == HTTPStatus.OK
