# PATH: apps/domains/exam_sessions/views/exam_views.py
from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from academy.application.use_cases.exam_session import (
    authenticate,
    check_availability,
    list_exam_sessions,
    list_my_results,
)
from apps.domains.exam_sessions.permissions import IsExamCreator, student_viewer, viewer_for
from apps.domains.exam_sessions.serializers import (
    AuthenticateSerializer,
    availability_payload,
    session_payload,
)
from apps.domains.exam_sessions.services.engine import get_session_context


class ExamAvailabilityView(APIView):
    """
    입장 전 안내: 응시 창/제한 시간/비밀번호 필요 여부
    (정답/비밀번호 해시는 절대 노출하지 않음)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, exam_id: int):
        out = check_availability(get_session_context(), str(exam_id))
        return Response(availability_payload(out))


class ExamAuthenticateView(APIView):
    """
    시험 입장. ACTIVE 세션이 있으면 그대로 반환 (200), 새로 만들면 201.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, exam_id: int):
        serializer = AuthenticateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        out = authenticate(
            get_session_context(),
            exam_id=str(exam_id),
            student_id=str(request.user.pk),
            password=serializer.validated_data.get("password") or "",
        )
        return Response(
            session_payload(out),
            status=status.HTTP_200_OK if out.resumed else status.HTTP_201_CREATED,
        )


class ExamSessionListView(APIView):
    """출제자: 시험별 응시/제출 목록 (항상 상세)."""
    permission_classes = [IsAuthenticated, IsExamCreator]

    def get(self, request, exam_id: int):
        results = list_exam_sessions(get_session_context(), str(exam_id), viewer_for(request.user))
        return Response([r.to_dict() for r in results])


class MyExamResultsView(APIView):
    """학생: 본인 결과 목록 (공개 정책 적용)."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        results = list_my_results(get_session_context(), student_viewer(request.user))
        return Response([r.to_dict() for r in results])
