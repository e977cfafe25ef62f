"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from foodscan.api.app import create_app
from foodscan.containers import AppContainer
from tests.conftest import COOKIE_BARCODE, OAT_BARCODE, FakeOffClient, off_product


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_returns_full_report(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze",
        json={
            "nutrition": {
                "calories": 150,
                "sugar": 2,
                "fat": 3,
                "salt": 0.1,
                "protein": 20,
                "fiber": 10,
            },
            "preferences": {"calorie_goal": 1800, "is_diabetic": True},
            "product": {"name": "Chicken salad", "ingredients_text": "chicken"},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["health_score"]["grade"] == "A+"
    assert body["health_score"]["diabetic_warning"].startswith("✅ SAFE")
    assert body["options"]["gender"] == "female"
    assert body["daily_values"]["entries"]["protein"]["category"] == "Excellent"
    assert body["diabetic_warnings"][0]["priority"] == 5
    assert body["population"]["child"]["suitability"] == "good"
    assert body["population"]["pregnant"]["severity_score"] is not None


def test_analyze_infers_pregnancy_profile(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/analyze",
        json={
            "nutrition": {"protein": 71},
            "preferences": {"dietary_preferences": ["pregnant"]},
            "target_groups": ["pregnant"],
        },
    )

    body = response.json()
    assert body["options"]["profile"] == "pregnant"
    assert body["daily_values"]["entries"]["protein"]["percentage"] == 100
    assert list(body["population"]) == ["pregnant"]


def test_population_endpoint(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/population/pregnant",
        json={
            "nutrition": {"sugar": 1},
            "product": {"ingredients_text": "contains alcohol"},
        },
    )

    body = response.json()
    assert body["suitability"] == "avoid"
    assert body["severity_score"] == 100


def test_population_endpoint_unknown_group(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/population/teenager", json={"nutrition": {"sugar": 1}})

    assert response.status_code == 200
    assert response.json()["suitability"] == "insufficient_data"
    assert response.json()["severity_score"] is None


def test_product_lookup(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get(
        f"/products/{OAT_BARCODE}", params={"gender": "female", "is_diabetic": True}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["product"]["name"] == "Oat Drink"
    assert body["product"]["allergens"] == ["gluten"]
    assert body["report"]["options"]["is_diabetic"] is True
    assert body["report"]["data_quality"]["quality"] == "excellent"


def test_product_lookup_errors(
    container: AppContainer, off_client: FakeOffClient
) -> None:
    client = TestClient(create_app(container))

    assert client.get("/products/not-a-code").status_code == 400
    assert client.get("/products/0000000000000").status_code == 404

    off_client.failures = 10
    assert client.get("/products/4000000000001").status_code == 502


def test_alternatives_endpoint(
    container: AppContainer, off_client: FakeOffClient
) -> None:
    off_client.search_results = [
        off_product(code="1111111111111", product_name="Oat Biscuits")
    ]
    client = TestClient(create_app(container))

    response = client.get(f"/products/{COOKIE_BARCODE}/alternatives")

    assert response.status_code == 200
    alternatives = response.json()["alternatives"]
    assert alternatives[0]["name"] == "Oat Biscuits"
    assert alternatives[0]["improvement"] > 0


def test_search_endpoint(container: AppContainer, off_client: FakeOffClient) -> None:
    off_client.search_results = [off_product()]
    client = TestClient(create_app(container))

    response = client.get("/search", params={"q": "oat", "nutriscore": "a,b"})

    assert response.status_code == 200
    assert response.json()["products"][0]["barcode"] == OAT_BARCODE
    assert off_client.last_search is not None
    assert off_client.last_search["nutriscore_grades"] == "a,b"


def test_search_endpoint_upstream_failure(
    container: AppContainer, off_client: FakeOffClient
) -> None:
    off_client.failures = 10
    client = TestClient(create_app(container))

    assert client.get("/search", params={"q": "oat"}).status_code == 502
