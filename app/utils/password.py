"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification helpers built on bcrypt.
Passwords are never stored in plain text.
"""

import bcrypt

# 최소 비밀번호 길이 — Minimum accepted password length for new logins
MIN_PASSWORD_LENGTH: int = 8


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시(솔트 포함)로 변환합니다.

    Hash a plain text password with a fresh bcrypt salt.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 저장된 해시 비교 — Constant-time bcrypt comparison."""
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def is_acceptable_password(password: str) -> bool:
    """신규 로그인 비밀번호 정책 — 최소 길이, 문자와 숫자 각각 1개 이상.

    Password policy for logins created through the employee API:
    at least MIN_PASSWORD_LENGTH characters with a letter and a digit.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return False
    has_letter = any(c.isalpha() for c in password)
    has_digit = any(c.isdigit() for c in password)
    return has_letter and has_digit
