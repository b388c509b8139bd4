"""
HTTP-level tests for the /v1 API

Routes run against the in-memory database and the fake Oura / breach
services wired up in conftest.
"""
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from fit360.api.deps import get_oura_client_factory
from fit360.core.config import settings
from fit360.main import app

from fakes import seed_full_week


def _today():
    return datetime.utcnow().date()


class TestOuraSync:
    def test_requires_session_before_any_outbound_call(self, client, oura_api):
        resp = client.post("/v1/oura-sync")

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert "error" in resp.json()
        assert oura_api.calls == []

    def test_invalid_token_is_rejected(self, client, oura_api):
        resp = client.post("/v1/oura-sync", headers={"Authorization": "Bearer not-a-session"})

        assert resp.status_code == 401
        assert oura_api.calls == []

    def test_missing_oura_token(self, client, auth_headers, oura_api, monkeypatch):
        monkeypatch.setattr(settings, "OURA_PERSONAL_ACCESS_TOKEN", None)

        resp = client.post("/v1/oura-sync", headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Oura token not configured"}
        assert oura_api.calls == []

    def test_successful_sync(self, client, auth_headers, oura_api):
        seed_full_week(oura_api, _today())

        resp = client.post("/v1/oura-sync", headers=auth_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Oura data synced successfully"
        assert body["records"] == 14
        assert "synced_at" in body

        latest = client.get("/v1/metrics/latest", headers=auth_headers).json()
        assert latest["sleep_score"] == 82
        assert latest["vo2_max"] == 44.2
        assert latest["resting_heart_rate"] is None

    def test_failing_endpoint_still_succeeds(self, client, auth_headers, oura_api):
        seed_full_week(oura_api, _today())
        oura_api.failures["vO2_max"] = 500

        resp = client.post("/v1/oura-sync", headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["success"] is True
        latest = client.get("/v1/metrics/latest", headers=auth_headers).json()
        assert latest["vo2_max"] is None
        assert latest["sleep_score"] == 82

    def test_unexpected_failure_is_reported(self, client, auth_headers):
        def broken_factory(token):
            raise RuntimeError("client exploded")

        app.dependency_overrides[get_oura_client_factory] = lambda: broken_factory

        resp = client.post("/v1/oura-sync", headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to sync Oura data", "details": "client exploded"}


class TestValidatePassword:
    def test_missing_password(self, client):
        resp = client.post("/v1/validate-password", json={})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Password is required"}

    def test_non_string_password(self, client):
        resp = client.post("/v1/validate-password", json={"password": 12345678})

        assert resp.status_code == 400

    def test_result_shape(self, client):
        resp = client.post("/v1/validate-password", json={"password": "Str0ng!Pass1234"})

        assert resp.status_code == 200
        assert resp.json() == {"is_valid": True, "errors": [], "strength": "strong", "is_breached": False}

    def test_weak_password(self, client):
        body = client.post("/v1/validate-password", json={"password": "abc"}).json()

        assert body["is_valid"] is False
        assert body["strength"] == "weak"
        assert len(body["errors"]) == 4


class TestAuthRoutes:
    def test_signup_signin_signout(self, client):
        resp = client.post(
            "/v1/auth/signup",
            json={"email": "new@example.com", "password": "Gr8!day9x#yz", "display_name": "Sam"},
        )
        assert resp.status_code == 201
        token = resp.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        me = client.get("/v1/auth/session", headers=headers)
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"
        assert client.get("/v1/profile", headers=headers).json()["display_name"] == "Sam"

        assert client.post("/v1/auth/signout", headers=headers).status_code == 200
        assert client.get("/v1/auth/session", headers=headers).status_code == 401

        signin = client.post("/v1/auth/signin", json={"email": "new@example.com", "password": "Gr8!day9x#yz"})
        assert signin.status_code == 200
        assert signin.json()["access_token"] != token

    def test_signup_rejects_weak_password(self, client):
        resp = client.post("/v1/auth/signup", json={"email": "x@example.com", "password": "abc"})

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Password does not meet requirements"
        assert body["details"]["strength"] == "weak"

    def test_signup_duplicate(self, client, test_user):
        resp = client.post("/v1/auth/signup", json={"email": test_user.email, "password": "Gr8!day9x#yz"})

        assert resp.status_code == 409

    def test_signup_bad_email(self, client):
        resp = client.post("/v1/auth/signup", json={"email": "not-an-email", "password": "Gr8!day9x#yz"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"

    def test_signin_wrong_password(self, client, test_user):
        resp = client.post("/v1/auth/signin", json={"email": test_user.email, "password": "nope"})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid login credentials"}


class TestReadRoutes:
    def test_latest_lists_every_type(self, client, auth_headers):
        body = client.get("/v1/metrics/latest", headers=auth_headers).json()

        assert "sleep_score" in body and "cardiovascular_age" in body
        assert all(v is None for v in body.values())

    def test_series_rejects_unknown_type(self, client, auth_headers):
        resp = client.get("/v1/metrics/series?types=sleep_score&types=mood", headers=auth_headers)

        assert resp.status_code == 400
        assert "mood" in resp.json()["error"]

    def test_series_after_sync(self, client, auth_headers, oura_api):
        seed_full_week(oura_api, _today())
        client.post("/v1/oura-sync", headers=auth_headers)

        body = client.get("/v1/metrics/series?types=steps", headers=auth_headers).json()

        assert body == {"steps": [{"date": _today().isoformat(), "value": 11234.0}]}

    def test_personal_info_before_and_after_sync(self, client, auth_headers, oura_api):
        assert client.get("/v1/personal-info", headers=auth_headers).status_code == 404

        seed_full_week(oura_api, _today())
        client.post("/v1/oura-sync", headers=auth_headers)

        info = client.get("/v1/personal-info", headers=auth_headers).json()
        assert info["ring_model"] == "gen3"
        assert "email" not in info

    def test_lists_after_sync(self, client, auth_headers, oura_api):
        seed_full_week(oura_api, _today())
        client.post("/v1/oura-sync", headers=auth_headers)

        workouts = client.get("/v1/workouts", headers=auth_headers).json()
        sessions = client.get("/v1/sessions", headers=auth_headers).json()
        tags = client.get("/v1/tags", headers=auth_headers).json()

        assert [w["oura_workout_id"] for w in workouts] == ["w-1"]
        assert sessions[0]["category"] == "meditation"
        assert tags[0]["tags"] == ["caffeine"]


class TestDashboard:
    def test_empty_dashboard(self, client, auth_headers):
        body = client.get("/v1/dashboard", headers=auth_headers).json()

        assert len(body["cards"]) == 9
        assert [i["id"] for i in body["insights"]] == ["sync"]
        assert body["personal_info"] is None
        assert body["recent_workouts"] == []
        assert set(body["charts"]) == {"sleep", "readiness", "steps", "stress", "resilience"}

    def test_dashboard_after_sync(self, client, auth_headers, oura_api):
        seed_full_week(oura_api, _today())
        client.post("/v1/oura-sync", headers=auth_headers)

        body = client.get("/v1/dashboard", headers=auth_headers).json()

        cards = {c["key"]: c for c in body["cards"]}
        assert cards["sleep_score"]["value"] == 82
        assert cards["steps"]["value"] == 11234
        ids = [i["id"] for i in body["insights"]]
        assert ids == ["sleep", "readiness", "activity", "stress", "workout"]
        assert body["personal_info"]["age"] == 34
        assert len(body["recent_workouts"]) == 1

    def test_insights_route(self, client, auth_headers):
        body = client.get("/v1/insights", headers=auth_headers).json()

        assert body[0]["title"] == "Sync Your Data"

    def test_dashboard_requires_session(self, client):
        assert client.get("/v1/dashboard").status_code == 401


class TestMacros:
    def test_log_and_relog_same_day(self, client, auth_headers):
        day = _today().isoformat()
        first = client.post(
            "/v1/macros",
            headers=auth_headers,
            json={"calories": 2000, "protein": 150, "carbs": 200, "fat": 60, "date": day},
        )
        assert first.status_code == 200
        assert first.json()["macro_calories"] == 1940
        assert first.json()["difference"] == 60

        second = client.post(
            "/v1/macros",
            headers=auth_headers,
            json={"calories": 1950, "protein": 150, "carbs": 200, "fat": 60, "date": day},
        )
        assert second.json()["calories"] == 1950
        assert second.json()["difference"] is None

        listed = client.get("/v1/macros", headers=auth_headers).json()
        assert len(listed) == 1
        assert listed[0]["date"] == day

    def test_calories_required(self, client, auth_headers):
        resp = client.post("/v1/macros", headers=auth_headers, json={"calories": 0, "protein": 100})

        assert resp.status_code == 400

    def test_list_is_newest_first(self, client, auth_headers):
        for offset in (2, 0, 1):
            day = (_today() - timedelta(days=offset)).isoformat()
            client.post("/v1/macros", headers=auth_headers, json={"calories": 1800, "date": day})

        listed = client.get("/v1/macros?days=7", headers=auth_headers).json()

        assert [m["date"] for m in listed] == sorted((m["date"] for m in listed), reverse=True)
        assert len(listed) == 3


class TestPhotos:
    def _add(self, client, headers, ts, url):
        resp = client.post("/v1/photos", headers=headers, json={"fullres_url": url, "timestamp": ts})
        assert resp.status_code == 201
        return resp.json()

    def test_timeline_navigation_and_delete(self, client, auth_headers):
        old = self._add(client, auth_headers, "2024-06-01T08:00:00", "https://img.test/1.jpg")
        mid = self._add(client, auth_headers, "2024-06-08T08:00:00", "https://img.test/2.jpg")
        new = self._add(client, auth_headers, "2024-06-15T08:00:00", "https://img.test/3.jpg")

        listed = client.get("/v1/photos", headers=auth_headers).json()
        assert [p["id"] for p in listed] == [new["id"], mid["id"], old["id"]]
        assert listed[0]["thumbnail_url"] == "https://img.test/3.jpg"

        detail = client.get(f"/v1/photos/{mid['id']}", headers=auth_headers).json()
        assert detail["previous_id"] == new["id"]
        assert detail["next_id"] == old["id"]

        assert client.delete(f"/v1/photos/{mid['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/v1/photos/{mid['id']}", headers=auth_headers).status_code == 404
        assert client.delete(f"/v1/photos/{mid['id']}", headers=auth_headers).status_code == 404


    def test_offsets_are_ordered_in_utc(self, client, auth_headers):
        # 08:00 UTC, written with a +02:00 offset
        a = self._add(client, auth_headers, "2024-06-01T10:00:00+02:00", "https://img.test/a.jpg")
        b = self._add(client, auth_headers, "2024-06-01T09:00:00Z", "https://img.test/b.jpg")

        listed = client.get("/v1/photos", headers=auth_headers).json()

        assert [p["id"] for p in listed] == [b["id"], a["id"]]
        assert listed[1]["timestamp"] == "2024-06-01T08:00:00"
        detail = client.get(f"/v1/photos/{a['id']}", headers=auth_headers).json()
        assert detail["previous_id"] == b["id"]


class TestProfile:
    def test_partial_update(self, client, auth_headers):
        assert client.get("/v1/profile", headers=auth_headers).status_code == 200

        client.put("/v1/profile", headers=auth_headers, json={"display_name": "Runner", "units": "metric"})
        resp = client.put("/v1/profile", headers=auth_headers, json={"goal": "sub-3 marathon"})

        body = resp.json()
        assert body["display_name"] == "Runner"
        assert body["units"] == "metric"
        assert body["goal"] == "sub-3 marathon"

    def test_invalid_units(self, client, auth_headers):
        resp = client.put("/v1/profile", headers=auth_headers, json={"units": "stone"})

        assert resp.status_code == 400


def test_health(client):
    body = client.get("/v1/health").json()

    assert body["status"] == "ok"
    assert body["oura_configured"] is True


def test_cors_preflight(client):
    resp = client.options(
        "/v1/oura-sync",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unhandled_error_renders_json(client, auth_headers, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr("fit360.core.metrics.latest_metrics", broken)

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/v1/metrics/latest", headers=auth_headers)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
