"""
End-to-end tests for the REST API.

Usage:
    pytest tests/integration/test_quiz_api.py -v
"""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session


def create_quiz(client, headers, grade="5", subject="Math", count=3):
    response = client.post(
        "/quiz/create",
        json={"grade": grade, "subject": subject, "questionCount": count},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


def login(client, username):
    response = client.post("/login", json={"username": username, "password": "secret123"})
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestHealth:
    def test_root(self, client):
        data = client.get("/").json()

        assert data["service"] == "ai-quizzer"
        assert data["status"] == "ok"

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["components"]["database"] == "ok"
        assert data["components"]["ai"] == "not_configured"
        assert data["components"]["email"] == "not_configured"

    def test_config_hides_secrets(self, client):
        data = client.get("/config").json()

        assert data["auth"]["configured"] is True
        assert "test-secret" not in str(data)


class TestLogin:
    def test_issues_token(self, client):
        response = client.post("/login", json={"username": "alice", "password": "secret123"})

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["message"] == "Authentication successful"
        assert body["expiresIn"] == "1d"

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"username": "al", "password": "secret123"}, "username"),
            ({"username": "alice", "password": "123"}, "password"),
            ({"username": "alice"}, "password"),
        ],
    )
    def test_validation(self, client, payload, field):
        response = client.post("/login", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["path"] == "/login"
        assert body["method"] == "POST"
        assert any(d["field"] == field for d in body["details"])


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.post("/quiz/create", json={"grade": "5", "subject": "Math"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token missing"

    def test_invalid_token(self, client):
        response = client.get("/quiz/history", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_missing_secret_is_server_error(self, client, container, auth_headers):
        container.token_service.secret = None

        response = client.get("/quiz/history", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Server misconfigured"


class TestQuizFlow:
    def test_create_submit_retry(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)

        assert quiz["difficulty"] == "medium"
        assert quiz["adaptiveInfo"] == {"basedOnSubmissions": 0, "recommendedDifficulty": "medium"}
        assert len(quiz["questions"]) == 3
        assert quiz["questions"][0]["correctAnswer"] == 0

        submitted = client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 0, 1]}, headers=auth_headers)
        assert submitted.status_code == 200, submitted.text
        result = submitted.json()
        assert result["score"] == 67
        assert result["scoreAnalysis"]["correct"] == 2
        assert len(result["scoreAnalysis"]["analysis"]) == 3
        assert result["scoreAnalysis"]["analysis"][2]["correctAnswerIndex"] == 0
        assert len(result["improvementSuggestions"]) == 2
        assert result["learningPattern"]["trend"] == "insufficient_data"
        assert result["aiInsights"]["strengths"] == "Strong performance in Math"

        retry = client.post(f"/quiz/{quiz['id']}/retry", headers=auth_headers).json()
        assert retry["message"] == "Quiz retry initiated"
        assert retry["attemptNumber"] == 2
        assert retry["quiz"]["id"] == quiz["id"]

    def test_default_question_count(self, client, auth_headers):
        response = client.post("/quiz/create", json={"grade": "5", "subject": "Math"}, headers=auth_headers)

        assert len(response.json()["questions"]) == 5

    @pytest.mark.parametrize(
        "payload",
        [
            {"grade": "", "subject": "Math"},
            {"grade": "5", "subject": "M"},
            {"grade": "5", "subject": "Math", "questionCount": 0},
            {"grade": "5", "subject": "Math", "questionCount": 21},
        ],
    )
    def test_create_validation(self, client, auth_headers, payload):
        assert client.post("/quiz/create", json=payload, headers=auth_headers).status_code == 400

    @pytest.mark.parametrize("answers", [[], [4], [-1], list(range(4)) * 6])
    def test_submit_validation(self, client, auth_headers, answers):
        quiz = create_quiz(client, auth_headers)

        response = client.post(f"/quiz/{quiz['id']}/submit", json={"answers": answers}, headers=auth_headers)

        assert response.status_code == 400

    def test_submit_unknown_quiz(self, client, auth_headers):
        response = client.post("/quiz/999/submit", json={"answers": [0]}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Quiz not found"

    def test_adapts_to_strong_scores(self, client, auth_headers):
        for _ in range(2):
            quiz = create_quiz(client, auth_headers, count=2)
            client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 0]}, headers=auth_headers)

        quiz = create_quiz(client, auth_headers, count=2)

        assert quiz["difficulty"] == "hard"
        assert quiz["adaptiveInfo"]["basedOnSubmissions"] == 2


def failing_commit(session):
    raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


class TestCommitFailures:
    def test_create_reports_failed_commit(self, client, auth_headers, monkeypatch):
        with monkeypatch.context() as m:
            m.setattr(Session, "commit", failing_commit)
            response = client.post("/quiz/create", json={"grade": "5", "subject": "Math"}, headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["message"] == "Database connection failed"
        assert client.get("/quiz/history", headers=auth_headers).json() == []

    def test_submit_reports_failed_commit(self, client, auth_headers, monkeypatch):
        quiz = create_quiz(client, auth_headers, count=2)
        with monkeypatch.context() as m:
            m.setattr(Session, "commit", failing_commit)
            response = client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 0]}, headers=auth_headers)

        assert response.status_code >= 500
        history = client.get("/quiz/history", headers=auth_headers).json()
        assert history[0]["submissions"] == []


class TestHints:
    def test_hint(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)

        response = client.post(f"/quiz/{quiz['id']}/question/1/hint", json={"userAnswer": 2}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["questionId"] == 1
        assert body["isSpecific"] is True
        assert 0.7 <= body["confidence"] <= 1.0

    def test_hint_without_body(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)

        response = client.post(f"/quiz/{quiz['id']}/question/2/hint", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["isSpecific"] is False

    def test_unknown_question(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)

        response = client.post(f"/quiz/{quiz['id']}/question/4/hint", json={}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Question not found"

    def test_invalid_answer(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)

        response = client.post(f"/quiz/{quiz['id']}/question/1/hint", json={"userAnswer": 7}, headers=auth_headers)

        assert response.status_code == 400


class TestHistory:
    def test_history_with_submissions(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers)
        client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 0, 0]}, headers=auth_headers)
        create_quiz(client, auth_headers, subject="Science")

        history = client.get("/quiz/history", params={"subject": "Math"}, headers=auth_headers).json()

        assert [item["id"] for item in history] == [quiz["id"]]
        assert history[0]["submissions"][0]["score"] == 100

    def test_date_filters(self, client, auth_headers):
        create_quiz(client, auth_headers)

        response = client.get("/quiz/history", params={"toDate": "2000-01-01"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_inverted_range_rejected(self, client, auth_headers):
        response = client.get(
            "/quiz/history",
            params={"fromDate": "2024-05-02", "toDate": "2024-05-01"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_bad_date_rejected(self, client, auth_headers):
        response = client.get("/quiz/history", params={"fromDate": "yesterday"}, headers=auth_headers)

        assert response.status_code == 400


class TestAnalyticsAndLeaderboard:
    def test_analytics_unknown_user(self, client):
        headers = login(client, "ghost")

        response = client.get("/quiz/analytics", headers=headers)

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_analytics(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers, count=2)
        client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 1]}, headers=auth_headers)

        analytics = client.get("/quiz/analytics", headers=auth_headers).json()["analytics"]

        assert analytics["totalQuizzes"] == 1
        assert analytics["averageScore"] == 50
        assert analytics["subjectPerformance"]["Math"] == {"count": 1, "average": 50}
        assert analytics["improvementAreas"][0]["subject"] == "Math"
        assert analytics["recentTrend"]["trend"] == "insufficient_data"

    def test_leaderboard(self, client, auth_headers):
        bob = login(client, "bob")
        quiz = create_quiz(client, auth_headers, count=2)
        client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 1]}, headers=auth_headers)
        client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 0]}, headers=bob)

        board = client.get(
            "/quiz/leaderboard", params={"grade": "5", "subject": "Math", "limit": 1}, headers=auth_headers
        ).json()

        assert board["grade"] == "5"
        assert board["totalParticipants"] == 1
        assert board["leaderboard"][0]["username"] == "bob"
        assert board["leaderboard"][0]["rank"] == 1
        assert "completedAt" in board["leaderboard"][0]
        assert "lastUpdated" in board

    def test_leaderboard_refreshes_after_submit(self, client, auth_headers):
        quiz = create_quiz(client, auth_headers, count=1)
        params = {"grade": "5", "subject": "Math"}

        assert client.get("/quiz/leaderboard", params=params, headers=auth_headers).json()["leaderboard"] == []

        client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0]}, headers=auth_headers)
        board = client.get("/quiz/leaderboard", params=params, headers=auth_headers).json()

        assert [entry["username"] for entry in board["leaderboard"]] == ["alice"]

    @pytest.mark.parametrize("limit", [0, 101])
    def test_leaderboard_limit_bounds(self, client, auth_headers, limit):
        response = client.get(
            "/quiz/leaderboard", params={"grade": "5", "subject": "Math", "limit": limit}, headers=auth_headers
        )

        assert response.status_code == 400


class TestEmailAndSubmissions:
    def submit(self, client, headers):
        quiz = create_quiz(client, headers, count=2)
        return client.post(f"/quiz/{quiz['id']}/submit", json={"answers": [0, 1]}, headers=headers).json()

    def test_email_not_configured_returns_warning(self, client, auth_headers):
        submission = self.submit(client, auth_headers)

        response = client.post(
            "/quiz/send-email",
            json={"submissionId": submission["id"], "email": "kid@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["warning"]
        assert body["submissionId"] == submission["id"]
        assert body["score"] == 50

    def test_email_other_users_submission(self, client, auth_headers):
        submission = self.submit(client, auth_headers)

        response = client.post(
            "/quiz/send-email",
            json={"submissionId": submission["id"], "email": "kid@example.com"},
            headers=login(client, "mallory"),
        )

        assert response.status_code == 403

    def test_email_validation(self, client, auth_headers):
        response = client.post(
            "/quiz/send-email", json={"submissionId": 1, "email": "not-an-email"}, headers=auth_headers
        )

        assert response.status_code == 400

    def test_get_submission(self, client, auth_headers):
        submission = self.submit(client, auth_headers)

        body = client.get(f"/quiz/submission/{submission['id']}", headers=auth_headers).json()

        assert body["success"] is True
        assert body["data"]["answers"] == [0, 1]

    def test_get_submission_not_found(self, client, auth_headers):
        assert client.get("/quiz/submission/77", headers=auth_headers).status_code == 404
