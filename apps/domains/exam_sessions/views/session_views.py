# PATH: apps/domains/exam_sessions/views/session_views.py
from __future__ import annotations

import logging

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academy.application.use_cases.exam_session import (
    get_result,
    get_session_state,
    manual_grade,
    save_answer,
    submit,
)
from apps.domains.exam_sessions.permissions import IsExamCreator, student_viewer, viewer_for
from apps.domains.exam_sessions.serializers import (
    AnswerSaveSerializer,
    ManualGradeSerializer,
    session_state_payload,
)
from apps.domains.exam_sessions.services.engine import get_session_context

logger = logging.getLogger(__name__)


class SessionDetailView(APIView):
    """
    세션 상태 + 서버 시각/마감/남은 시간 (클라이언트 카운트다운은 표시용)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, session_id: str):
        state = get_session_state(get_session_context(), session_id, viewer_for(request.user))
        return Response(session_state_payload(state))


class SessionAnswerView(APIView):
    """
    autosave (주기적 호출)
    410 SessionExpired / 409 AlreadySubmitted 는 "저장 중단" 신호
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, session_id: str):
        serializer = AnswerSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = save_answer(
            get_session_context(),
            session_id=session_id,
            question_id=data["question_id"],
            value=data.get("value"),
            time_delta_seconds=data.get("time_delta_seconds") or 0,
            student_id=str(request.user.pk),
        )
        return Response(
            {
                "question_id": record.question_id,
                "value": record.value,
                "time_spent_seconds": record.time_spent_seconds,
                "saved_at": record.saved_at,
            }
        )


class SessionSubmitView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, session_id: str):
        ctx = get_session_context()
        session = submit(ctx, session_id, student_id=str(request.user.pk))
        result = get_result(ctx, session.session_id, student_viewer(request.user))
        return Response(result.to_dict())


class SessionGradeView(APIView):
    """
    출제자 수동 채점 (재채점 가능, 같은 입력 → 같은 결과)
    범위 밖 점수는 clamp 후 adjustments로 반환
    """
    permission_classes = [IsAuthenticated, IsExamCreator]

    def put(self, request, session_id: str):
        serializer = ManualGradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        out = manual_grade(
            get_session_context(),
            session_id=session_id,
            scores=serializer.manual_scores(),
            overall_feedback=serializer.validated_data.get("feedback"),
            grader=viewer_for(request.user),
        )
        return Response(
            {
                "result": out.result.to_dict(),
                "adjustments": [
                    {"question_id": a.question_id, "requested": a.requested, "applied": a.applied}
                    for a in out.adjustments
                ],
            }
        )


class SessionResultView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, session_id: str):
        result = get_result(get_session_context(), session_id, viewer_for(request.user))
        return Response(result.to_dict())
