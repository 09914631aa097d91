# PATH: apps/domains/exam_sessions/serializers/exam_session.py
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from rest_framework import serializers

from academy.application.use_cases.exam_session import (
    AuthenticatedSession,
    ExamAvailability,
    SessionState,
)
from academy.domain.exam_session.grading import ManualScore


# ==================================================
# Input
# ==================================================

class AuthenticateSerializer(serializers.Serializer):
    password = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)


class AnswerSaveSerializer(serializers.Serializer):
    """
    value 형태는 문항 유형별로 엔진에서 검증 (InvalidAnswer).
    time_delta_seconds: 직전 저장 이후 이 문항에 쓴 시간 (음수는 무시됨)
    """
    question_id = serializers.CharField(max_length=64)
    value = serializers.JSONField(allow_null=True)
    time_delta_seconds = serializers.FloatField(required=False, default=0)


class ScoreItemSerializer(serializers.Serializer):
    question_id = serializers.CharField(max_length=64)
    score = serializers.FloatField()
    feedback = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)

    def to_manual_score(self, data) -> ManualScore:
        return ManualScore(
            question_id=data["question_id"],
            score=data["score"],
            feedback=data.get("feedback"),
        )


class ManualGradeSerializer(serializers.Serializer):
    scores = ScoreItemSerializer(many=True)
    feedback = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)

    def manual_scores(self) -> list[ManualScore]:
        item = ScoreItemSerializer()
        return [item.to_manual_score(s) for s in self.validated_data["scores"]]


# ==================================================
# Output (dataclass → dict)
# ==================================================

def session_payload(auth: AuthenticatedSession) -> dict[str, Any]:
    s = auth.session
    return {
        "session_id": s.session_id,
        "exam_id": s.exam_id,
        "status": s.status.value,
        "resumed": auth.resumed,
        "started_at": s.started_at,
        "deadline": s.deadline,
        "title": auth.definition.title,
        "description": auth.definition.description,
        "questions": auth.public_questions(),
        "answers": {
            qid: {"value": rec.value, "time_spent_seconds": rec.time_spent_seconds}
            for qid, rec in s.answers.items()
        },
    }


def session_state_payload(state: SessionState) -> dict[str, Any]:
    return asdict(state)


def availability_payload(availability: ExamAvailability) -> dict[str, Any]:
    return asdict(availability)
