"""
HTTP API (DRF) 흐름 + 오류 응답 형태
"""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.domains.exam_sessions.services.engine import reset_engine
from libs.redis.client import reset_redis_state
from tests.django_factories import create_exam, create_user, question_ids

pytestmark = pytest.mark.django_db

BASE = "/api/v1/exam-sessions"


@pytest.fixture(autouse=True)
def _engine(monkeypatch):
    monkeypatch.delenv("REDIS_HOST", raising=False)
    reset_redis_state()
    reset_engine()
    yield
    reset_engine()
    reset_redis_state()


@pytest.fixture
def teacher():
    return create_user("teacher", is_staff=True)


@pytest.fixture
def student():
    return create_user("student")


@pytest.fixture
def exam(teacher):
    return create_exam(teacher)


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


class TestExamFlow:
    def test_authenticate_answer_submit_grade_result(self, exam, teacher, student):
        api = client_for(student)
        q1, q2 = question_ids(exam)

        res = api.post(f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json")
        assert res.status_code == 201
        session_id = res.data["session_id"]
        assert all("correct_answer" not in q for q in res.data["questions"])

        again = api.post(f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json")
        assert again.status_code == 200
        assert again.data["session_id"] == session_id

        res = api.put(
            f"{BASE}/sessions/{session_id}/answers/",
            {"question_id": q1, "value": "B", "time_delta_seconds": 40},
            format="json",
        )
        assert res.status_code == 200
        assert res.data["time_spent_seconds"] == 40
        api.put(
            f"{BASE}/sessions/{session_id}/answers/",
            {"question_id": q2, "value": "cells", "time_delta_seconds": 100},
            format="json",
        )

        res = api.get(f"{BASE}/sessions/{session_id}/")
        assert res.status_code == 200
        assert res.data["accepting_answers"] is True
        assert res.data["answers"][q1]["value"] == "B"

        res = api.post(f"{BASE}/sessions/{session_id}/submit/")
        assert res.status_code == 200
        assert res.data["status"] == "SUBMITTED"
        assert res.data["detail_visible"] is False
        assert res.data["message"] == "Submitted, pending review."

        res = client_for(teacher).put(
            f"{BASE}/sessions/{session_id}/grade/",
            {"scores": [{"question_id": q2, "score": 3}], "feedback": "Nice"},
            format="json",
        )
        assert res.status_code == 200
        assert res.data["result"]["final_score"] == 13.0
        assert res.data["result"]["percentage"] == 86.7
        assert res.data["adjustments"] == []

        res = api.get(f"{BASE}/sessions/{session_id}/result/")
        assert res.status_code == 200
        assert res.data["status"] == "GRADED"
        assert res.data["final_score"] == 13.0
        assert res.data["feedback"] == "Nice"

        res = api.get(f"{BASE}/me/results/")
        assert [r["session_id"] for r in res.data] == [session_id]

        res = client_for(teacher).get(f"{BASE}/exams/{exam.pk}/sessions/")
        assert res.status_code == 200
        assert len(res.data) == 1

    def test_availability(self, exam, student):
        res = client_for(student).get(f"{BASE}/exams/{exam.pk}/availability/")
        assert res.status_code == 200
        assert res.data["is_available"] is True
        assert res.data["requires_password"] is True
        assert "password" not in res.data


class TestErrorResponses:
    def test_wrong_password(self, exam, student):
        res = client_for(student).post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "nope"}, format="json"
        )
        assert res.status_code == 403
        assert res.data == {"code": "InvalidCredentials", "detail": "Invalid exam credentials."}

    def test_closed_window(self, teacher, student):
        exam = create_exam(
            teacher,
            open_at=timezone.now() - timedelta(hours=5),
            close_at=timezone.now() - timedelta(hours=1),
        )
        res = client_for(student).post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        )
        assert res.status_code == 403
        assert res.data["code"] == "WindowClosed"

    def test_unknown_exam(self, student):
        res = client_for(student).post(f"{BASE}/exams/424242/authenticate/", {}, format="json")
        assert res.status_code == 404
        assert res.data["code"] == "ExamNotFound"

    def test_double_submit(self, exam, student):
        api = client_for(student)
        session_id = api.post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        ).data["session_id"]

        assert api.post(f"{BASE}/sessions/{session_id}/submit/").status_code == 200
        res = api.post(f"{BASE}/sessions/{session_id}/submit/")
        assert res.status_code == 409
        assert res.data["code"] == "AlreadySubmitted"

    def test_invalid_answer(self, exam, student):
        api = client_for(student)
        session_id = api.post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        ).data["session_id"]

        res = api.put(
            f"{BASE}/sessions/{session_id}/answers/",
            {"question_id": "no-such-question", "value": "A"},
            format="json",
        )
        assert res.status_code == 400
        assert res.data["code"] == "InvalidAnswer"

    def test_other_student_cannot_read_session(self, exam, student):
        session_id = client_for(student).post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        ).data["session_id"]

        res = client_for(create_user("intruder")).get(f"{BASE}/sessions/{session_id}/")
        assert res.status_code == 403
        assert res.data["code"] == "NotPermitted"

    def test_student_cannot_grade(self, exam, student):
        session_id = client_for(student).post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        ).data["session_id"]

        res = client_for(student).put(
            f"{BASE}/sessions/{session_id}/grade/", {"scores": []}, format="json"
        )
        assert res.status_code == 403

    def test_result_of_active_session(self, exam, student):
        api = client_for(student)
        session_id = api.post(
            f"{BASE}/exams/{exam.pk}/authenticate/", {"password": "secret"}, format="json"
        ).data["session_id"]

        res = api.get(f"{BASE}/sessions/{session_id}/result/")
        assert res.status_code == 409
        assert res.data["code"] == "ResultNotAvailable"

    def test_unauthenticated(self, exam):
        res = APIClient().get(f"{BASE}/exams/{exam.pk}/availability/")
        assert res.status_code == 401


class TestHealth:
    def test_health_without_redis(self):
        res = APIClient().get("/health/")
        assert res.status_code == 200
        assert res.json()["redis"] == "disabled"
        assert res.json()["database"] == "connected"
