"""Tests for the response API — viewing, password checks, export, deletion."""

import csv
import io
import json

import pytest

RESPONSES = "/api/v1/responses"


@pytest.fixture
def filled_form(client, clock, create_form):
    """A form with two responses submitted a minute apart."""

    def _make(**overrides) -> dict:
        created = create_form(**overrides)
        url = f"/api/v1/forms/{created['fillLink']}/responses"
        first = {"name": "Sita", "place": ["pizza", "tacos"], "vegan": True, "hunger": 5}
        second = {"name": "Ram", "place": "sushi", "vegan": "no"}
        assert client.post(url, json={"answers": first}).status_code == 201
        clock.advance(minutes=1)
        assert client.post(url, json={"answers": second}).status_code == 201
        return created

    return _make


# ---------------------------------------------------------------------------
# Viewing
# ---------------------------------------------------------------------------


class TestViewResponses:
    def test_open_form(self, client, filled_form):
        created = filled_form()
        response = client.get(f"{RESPONSES}/{created['responseLink']}")
        assert response.status_code == 200
        data = response.json()

        assert data["form"]["title"] == "Team Lunch Poll"
        assert data["form"]["fillLink"] == created["fillLink"]
        assert data["form"]["responseCount"] == 2
        assert data["statistics"]["totalResponses"] == 2
        assert data["statistics"]["firstResponse"] < data["statistics"]["lastResponse"]

        newest, oldest = data["responses"]
        assert newest["answers"]["name"] == "Ram"
        assert newest["formattedAnswers"] == {"Your name": "Ram", "Where?": "Sushi", "Vegan?": "No"}
        assert oldest["formattedAnswers"]["Where?"] == "Pizza, Tacos"
        assert oldest["formattedAnswers"]["Vegan?"] == "Yes"
        assert oldest["formattedAnswers"]["Hunger"] == "5"

    def test_empty(self, client, create_form):
        created = create_form()
        data = client.get(f"{RESPONSES}/{created['responseLink']}").json()
        assert data["responses"] == []
        assert data["statistics"] == {"totalResponses": 0, "firstResponse": None, "lastResponse": None}

    def test_malformed_link_is_404(self, client, create_form):
        created = create_form()
        # A fill link is not a valid response link
        assert client.get(f"{RESPONSES}/{created['fillLink']}").status_code == 404
        assert client.get(f"{RESPONSES}/{'f' * 32}").status_code == 404


class TestPasswordScenario:
    def test_password_gate(self, client, filled_form):
        created = filled_form(responsePassword="lunch-secret")
        url = f"{RESPONSES}/{created['responseLink']}"

        response = client.get(url)
        assert response.status_code == 401
        assert response.json()["detail"]["reason"] == "password_required"

        response = client.get(url, params={"password": "wrong-one"})
        assert response.status_code == 401
        assert response.json()["detail"]["message"] == "Invalid password"

        response = client.get(url, params={"password": "lunch-secret"})
        assert response.status_code == 200
        assert len(response.json()["responses"]) == 2

    def test_expired_wins_over_correct_password(self, client, clock, filled_form):
        created = filled_form(responsePassword="lunch-secret", expirationTime="15min")
        clock.advance(minutes=20)
        response = client.get(f"{RESPONSES}/{created['responseLink']}", params={"password": "lunch-secret"})
        assert response.status_code == 410

    def test_verify_password(self, client, create_form):
        created = create_form(responsePassword="lunch-secret")
        url = f"{RESPONSES}/{created['responseLink']}/verify-password"
        assert client.post(url, json={"password": "lunch-secret"}).json() == {"passwordValid": True}
        assert client.post(url, json={"password": "nope"}).json() == {"passwordValid": False}

    def test_verify_password_without_password_set(self, client, create_form):
        created = create_form()
        response = client.post(
            f"{RESPONSES}/{created['responseLink']}/verify-password", json={"password": "anything"}
        )
        assert response.status_code == 400

    def test_verify_password_requires_body(self, client, create_form):
        created = create_form(responsePassword="lunch-secret")
        response = client.post(f"{RESPONSES}/{created['responseLink']}/verify-password", json={})
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_csv(self, client, filled_form):
        created = filled_form()
        response = client.get(f"{RESPONSES}/{created['responseLink']}/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="team_lunch_poll.csv"' in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Submitted At", "Your name", "Where?", "Vegan?", "Hunger"]
        assert rows[1][1:] == ["Sita", "Pizza, Tacos", "Yes", "5"]
        assert rows[2][1:] == ["Ram", "Sushi", "No", ""]

    def test_json(self, client, filled_form):
        created = filled_form()
        response = client.get(f"{RESPONSES}/{created['responseLink']}/export", params={"format": "json"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")

        payload = json.loads(response.text)
        assert payload["form"]["title"] == "Team Lunch Poll"
        assert payload["form"]["exportedAt"]
        assert [r["answers"]["name"] for r in payload["responses"]] == ["Sita", "Ram"]

    def test_bad_format(self, client, create_form):
        created = create_form()
        response = client.get(f"{RESPONSES}/{created['responseLink']}/export", params={"format": "xml"})
        assert response.status_code == 400

    def test_password_protected(self, client, filled_form):
        created = filled_form(responsePassword="lunch-secret")
        url = f"{RESPONSES}/{created['responseLink']}/export"
        assert client.get(url).status_code == 401
        assert client.get(url, params={"password": "lunch-secret"}).status_code == 200


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


class TestDeleteResponses:
    def test_delete_selected(self, client, filled_form):
        created = filled_form()
        url = f"{RESPONSES}/{created['responseLink']}"
        ids = [r["id"] for r in client.get(url).json()["responses"]]

        response = client.request("DELETE", url, json={"responseIds": [ids[0], "missing"]})
        assert response.status_code == 200
        assert response.json() == {"deleted": 1}
        assert [r["id"] for r in client.get(url).json()["responses"]] == [ids[1]]

    def test_requires_password(self, client, filled_form):
        created = filled_form(responsePassword="lunch-secret")
        url = f"{RESPONSES}/{created['responseLink']}"
        ids = [r["id"] for r in client.get(url, params={"password": "lunch-secret"}).json()["responses"]]

        assert client.request("DELETE", url, json={"responseIds": ids}).status_code == 401
        response = client.request("DELETE", url, json={"responseIds": ids, "password": "lunch-secret"})
        assert response.json() == {"deleted": 2}

    def test_empty_id_list_rejected(self, client, create_form):
        created = create_form()
        response = client.request("DELETE", f"{RESPONSES}/{created['responseLink']}", json={"responseIds": []})
        assert response.status_code == 400
