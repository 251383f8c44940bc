"""
API integration tests through the FastAPI TestClient
"""

from conftest import TEST_PASSWORD, auth_headers

from edumorph.core.models import UserRole


def _record(client, token, **overrides):
    payload = {
        "subject": "Math",
        "topic": "Algebra",
        "score": 85,
        "timeSpent": 20,
        "difficulty": "intermediate",
    }
    payload.update(overrides)
    return client.post("/api/progress", json=payload, headers=auth_headers(token))


class TestStatusAndAuth:
    def test_status(self, client):
        resp = client.get("/api/status")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "online"
        assert body["database"] == "online"

    def test_register_login_me(self, client):
        resp = client.post(
            "/api/auth/register",
            json={
                "email": "new.student@school.edu",
                "password": TEST_PASSWORD,
                "display_name": "New Student",
                "grade": "8",
            },
        )
        assert resp.status_code == 200, resp.text
        user = resp.json()
        assert user["role"] == "student"
        assert "passwordHash" not in user

        resp = client.post(
            "/api/auth/login",
            data={"username": "new.student@school.edu", "password": TEST_PASSWORD},
        )
        assert resp.status_code == 200
        token = resp.json()["access_token"]
        assert resp.json()["token_type"] == "bearer"

        me = client.get("/api/auth/me", headers=auth_headers(token))
        assert me.status_code == 200
        assert me.json()["uid"] == user["uid"]

    def test_admin_self_registration_forbidden(self, client):
        resp = client.post(
            "/api/auth/register",
            json={
                "email": "boss@school.edu",
                "password": TEST_PASSWORD,
                "display_name": "Boss",
                "role": "admin",
            },
        )
        assert resp.status_code == 403

    def test_duplicate_and_weak_registrations(self, client, test_student):
        resp = client.post(
            "/api/auth/register",
            json={
                "email": test_student.email,
                "password": TEST_PASSWORD,
                "display_name": "Again",
            },
        )
        assert resp.status_code == 400

        resp = client.post(
            "/api/auth/register",
            json={"email": "weak@school.edu", "password": "weak", "display_name": "W"},
        )
        assert resp.status_code == 400

    def test_bad_credentials(self, client, test_student):
        resp = client.post(
            "/api/auth/login",
            data={"username": test_student.email, "password": "Wrong123!"},
        )
        assert resp.status_code == 401

        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers=auth_headers("garbage")).status_code == 401


class TestProgressAndMetrics:
    def test_metrics_missing_before_first_event(self, client, test_student, student_token):
        resp = client.get(f"/api/metrics/{test_student.uid}", headers=auth_headers(student_token))
        assert resp.status_code == 404

    def test_student_records_progress(self, client, test_student, student_token):
        resp = _record(client, student_token)

        assert resp.status_code == 201, resp.text
        event = resp.json()
        assert event["studentId"] == test_student.uid
        assert event["difficulty"] == "intermediate"
        assert event["completedAt"].endswith("Z")

        resp = client.get(f"/api/metrics/{test_student.uid}", headers=auth_headers(student_token))
        assert resp.status_code == 200
        metrics = resp.json()
        assert metrics["overallScore"] == 85
        assert metrics["strengths"] == ["Math"]

        resp = client.get(
            f"/api/progress/{test_student.uid}?limit=1", headers=auth_headers(student_token)
        )
        assert resp.status_code == 200
        assert len(resp.json()) == 1

    def test_invalid_progress_rejected(self, client, student_token):
        assert _record(client, student_token, attempts=0).status_code == 422
        assert _record(client, student_token, subject="").status_code == 422

    def test_teacher_cannot_record_progress(self, client, teacher_token):
        assert _record(client, teacher_token).status_code == 403

    def test_student_cannot_view_other_student(self, client, make_user, student_token):
        other = make_user(UserRole.STUDENT)

        resp = client.get(f"/api/progress/{other.uid}", headers=auth_headers(student_token))
        assert resp.status_code == 403

    def test_teacher_access_follows_consent(
        self, client, test_student, student_token, teacher_token
    ):
        _record(client, student_token)
        url = f"/api/metrics/{test_student.uid}"

        assert client.get(url, headers=auth_headers(teacher_token)).status_code == 200

        resp = client.put(
            "/api/privacy",
            json={"dataSharing": {"teacherView": False}},
            headers=auth_headers(student_token),
        )
        assert resp.status_code == 200
        assert resp.json()["dataSharing"]["teacherView"] is False

        assert client.get(url, headers=auth_headers(teacher_token)).status_code == 403
        assert client.get(url, headers=auth_headers(student_token)).status_code == 200


class TestAnalyticsEndpoints:
    def test_gaps_insights_and_difficulty(self, client, test_student, student_token):
        headers = auth_headers(student_token)
        _record(client, student_token, subject="History", topic="Rome", score=35)
        _record(client, student_token, subject="Math", topic="Algebra", score=95)

        gaps = client.post(f"/api/gaps/{test_student.uid}", headers=headers).json()
        assert [(g["topic"], g["priority"]) for g in gaps] == [("Rome", "high")]
        stored = client.get(f"/api/gaps/{test_student.uid}", headers=headers).json()
        assert len(stored) == 1

        empty = client.get(f"/api/insights/{test_student.uid}", headers=headers).json()
        assert empty["insights"] == []
        insights = client.post(f"/api/insights/{test_student.uid}", headers=headers).json()
        assert {i["type"] for i in insights} >= {"achievement", "weakness"}
        batch = client.get(f"/api/insights/{test_student.uid}", headers=headers).json()
        assert len(batch["insights"]) == len(insights)

        resp = client.get(
            f"/api/difficulty/{test_student.uid}/recommended?subject=Math", headers=headers
        )
        assert resp.json() == {"subject": "Math", "difficulty": "intermediate"}

        pace = client.get(f"/api/difficulty/{test_student.uid}/pace", headers=headers).json()
        assert 0.5 <= pace["multiplier"] <= 1.5
        assert pace["recommendations"]

        resp = client.post(
            f"/api/difficulty/{test_student.uid}/adjust",
            json={"current": "advanced"},
            headers=headers,
        )
        assert resp.json() == {"previous": "advanced", "difficulty": "advanced", "changed": False}

    def test_reports(self, client, test_student, student_token):
        headers = auth_headers(student_token)
        url = f"/api/reports/{test_student.uid}"

        assert client.post(url, headers=headers).status_code == 404

        _record(client, student_token, score=92)
        resp = client.post(url, headers=headers)
        assert resp.status_code == 201, resp.text
        report = resp.json()
        assert report["overallGrade"] == "A+"
        assert report["subjects"][0]["subject"] == "Math"

        listed = client.get(url, headers=headers).json()
        assert [r["reportId"] for r in listed] == [report["reportId"]]

        resp = client.get(f"{url}/{report['reportId']}", headers=headers)
        assert resp.status_code == 200
        assert client.get(f"{url}/missing", headers=headers).status_code == 404

        resp = client.post(
            url,
            json={"start": "2024-02-01T00:00:00Z", "end": "2024-01-01T00:00:00Z"},
            headers=headers,
        )
        assert resp.status_code == 422


class TestMatchesAndPrivacy:
    def test_matchmaking(self, client, make_user, test_student, student_token):
        other = make_user(UserRole.STUDENT, email="partner@school.edu")
        headers = auth_headers(student_token)
        _record(client, student_token, score=80)
        _record(client, _login_token(client, other.email), score=78)

        resp = client.post("/api/matches", json={"subjects": ["Math"]}, headers=headers)
        assert resp.status_code == 200, resp.text
        matches = resp.json()
        assert [m["student2"] for m in matches] == [other.uid]
        assert matches[0]["compatibilityScore"] == 98

        saved = client.get("/api/matches", headers=headers).json()
        assert [m["matchId"] for m in saved] == [matches[0]["matchId"]]

        assert (
            client.post("/api/matches", json={"subjects": []}, headers=headers).status_code
            == 422
        )

    def test_matchmaking_requires_consent(self, client, student_token):
        headers = auth_headers(student_token)
        client.put(
            "/api/privacy", json={"dataSharing": {"matchmaking": False}}, headers=headers
        )

        resp = client.post("/api/matches", json={"subjects": ["Math"]}, headers=headers)
        assert resp.status_code == 403

    def test_privacy_settings_and_cleanup(self, client, student_token):
        headers = auth_headers(student_token)

        settings = client.get("/api/privacy", headers=headers).json()
        assert settings["dataRetention"] == {"progressHistory": 365, "activityLogs": 90}

        resp = client.put(
            "/api/privacy", json={"dataRetention": {"activityLogs": 30}}, headers=headers
        )
        assert resp.json()["dataRetention"] == {"progressHistory": 365, "activityLogs": 30}

        bad = client.put(
            "/api/privacy", json={"dataRetention": {"progressHistory": 0}}, headers=headers
        )
        assert bad.status_code == 422

        too_long = client.put(
            "/api/privacy", json={"dataRetention": {"progressHistory": 1000000}}, headers=headers
        )
        assert too_long.status_code == 422

        _record(client, student_token)
        result = client.post("/api/privacy/cleanup", headers=headers).json()
        assert result["deletedProgress"] == 0
        assert result["progressCutoff"].endswith("Z")


class TestDashboard:
    def test_student_dashboard(self, client, test_student, student_token):
        headers = auth_headers(student_token)
        empty = client.get("/api/dashboard", headers=headers).json()
        assert empty["metrics"] is None
        assert empty["recentProgress"] == []

        for score in (70, 80, 90, 60, 50, 40):
            _record(client, student_token, score=score)

        data = client.get("/api/dashboard", headers=headers).json()
        assert data["user"]["role"] == "student"
        assert len(data["recentProgress"]) == 5
        assert data["metrics"]["overallScore"] == 65
        assert data["pace"]["multiplier"] == 1.0

    def test_teacher_dashboard(self, client, teacher_token):
        data = client.get("/api/dashboard", headers=auth_headers(teacher_token)).json()

        assert data["user"]["role"] == "teacher"
        assert data["metrics"] is None


def _login_token(client, email):
    resp = client.post("/api/auth/login", data={"username": email, "password": TEST_PASSWORD})
    return resp.json()["access_token"]
