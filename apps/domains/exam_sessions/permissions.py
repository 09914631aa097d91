# PATH: apps/domains/exam_sessions/permissions.py
from __future__ import annotations

from rest_framework.permissions import BasePermission

from academy.domain.exam_session.entities import Viewer, ViewerRole


def _role(u) -> str:
    """
    user.role / user.user_type 이 있으면 쓰고, 없으면 is_staff/is_superuser로 판단.
    """
    v = getattr(u, "role", None) or getattr(u, "user_type", None) or ""
    return str(v).upper()


def is_admin_user(u) -> bool:
    return bool(getattr(u, "is_superuser", False) or getattr(u, "is_staff", False) or _role(u) in ("ADMIN", "STAFF"))


def is_creator_user(u) -> bool:
    # 출제 권한: 관리자 또는 TEACHER
    return bool(is_admin_user(u) or _role(u) in ("TEACHER",))


def student_viewer(u) -> Viewer:
    return Viewer(user_id=str(u.pk), role=ViewerRole.STUDENT)


def viewer_for(u) -> Viewer:
    """요청 사용자 → 엔진 Viewer (엔진은 신원 확인을 하지 않고 이 값을 신뢰)."""
    if is_creator_user(u):
        return Viewer(user_id=str(u.pk), role=ViewerRole.CREATOR, is_admin=is_admin_user(u))
    return student_viewer(u)


class IsExamCreator(BasePermission):
    """시험 단위 소유 확인은 엔진(NotPermitted)에서, 여기서는 역할만."""

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        return bool(u and u.is_authenticated and is_creator_user(u))
