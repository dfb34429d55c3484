"""Tests for admin endpoints."""

from datetime import UTC, datetime

from fastapi.testclient import TestClient

from registration_desk.api.app import create_app
from registration_desk.containers import AppContainer
from tests.conftest import InMemoryDocumentStore

HEADERS = {"X-Admin-Token": "admin-token"}


def _seed(document_store: InMemoryDocumentStore) -> None:
    for index, (name, age, mandalam) in enumerate(
        [("Asha K", 24, "Kollam"), ("Biju R", 41, "Kottayam")]
    ):
        document_store.documents[f"registrations/uid-{index}"] = {
            "id": f"uid-{index}",
            "name": name,
            "phone": "+919876543210",
            "age": age,
            "mandalam": mandalam,
            "mekhala": "North",
            "unit": "Unit 3",
            "photo_url": "",
            "submission_date": datetime(2024, 5, index + 1, tzinfo=UTC).isoformat(),
            "accepted_declaration": True,
        }


def test_admin_requires_token(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/admin/health").status_code == 401
    assert (
        client.get("/admin/health", headers={"X-Admin-Token": "wrong"}).status_code
        == 401
    )
    assert client.get("/admin/health", headers=HEADERS).json() == {"status": "ok"}


def test_admin_registrations_endpoint(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    _seed(document_store)
    client = TestClient(create_app(container))

    response = client.get("/admin/registrations", headers=HEADERS)

    assert response.status_code == 200
    names = [row["name"] for row in response.json()["registrations"]]
    assert names == ["Biju R", "Asha K"]


def test_admin_registrations_filtered(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    _seed(document_store)
    client = TestClient(create_app(container))

    response = client.get(
        "/admin/registrations",
        params={"mandalam": "koll", "max_age": 30},
        headers=HEADERS,
    )

    rows = response.json()["registrations"]
    assert [row["name"] for row in rows] == ["Asha K"]


def test_admin_csv_export(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    _seed(document_store)
    client = TestClient(create_app(container))

    response = client.get(
        "/admin/registrations.csv", params={"name": "biju"}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "Biju R" in response.text
    assert "Asha K" not in response.text


def test_admin_pdf_export(
    container: AppContainer, document_store: InMemoryDocumentStore
) -> None:
    _seed(document_store)
    client = TestClient(create_app(container))

    response = client.get("/admin/registrations.pdf", headers=HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_admin_share_form(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get(
        "/admin/share-form", params={"clipboard": True}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json()["channel"] == "clipboard"
    assert response.json()["url"] == "http://localhost:8000/form"


def test_admin_ui_served(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/admin/ui")

    assert response.status_code == 200
    assert "Registration Desk Admin" in response.text
