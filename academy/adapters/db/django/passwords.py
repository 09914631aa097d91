"""
Password Verifier — Django password hasher 사용
"""
from __future__ import annotations


class DjangoPasswordVerifier:
    def verify(self, raw_password: str, encoded: str) -> bool:
        from django.contrib.auth.hashers import check_password
        if not encoded:
            return False
        return check_password(raw_password, encoded)
