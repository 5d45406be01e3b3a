"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Every domain failure is an AppError subclass carrying a fixed HTTP status,
a machine-readable code, a human message and optional structured metadata.
app.main renders them as {"success": false, "error": {code, message, metadata}}.

Usage:
    from app.utils.exceptions import NotFoundError, ShiftOverlapError
    raise NotFoundError("Shift not found")
    raise ShiftOverlapError(conflicts=[...])
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """도메인 예외 베이스 — 상태 코드, 오류 코드, 메타데이터 포함.

    Base class for all domain errors.
    Subclasses pin status_code and code; callers only supply the message
    and, where useful, structured metadata for the client.

    Args:
        message: 오류 메시지 (Human-readable error message)
        metadata: 추가 정보 (Structured details, e.g. conflict lists)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, metadata: dict[str, Any] | None = None) -> None:
        self.message: str = message or self.default_message
        self.metadata: dict[str, Any] | None = metadata
        super().__init__(status_code=type(self).status_code, detail=self.message)

    def to_dict(self) -> dict[str, Any]:
        """오류 응답 본문 구성 — Build the error body of the response envelope."""
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.metadata:
            body["metadata"] = self.metadata
        return body


class NotFoundError(AppError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (employee, shift, template, etc.) does not exist
    or has been soft-deleted.
    """

    status_code = status.HTTP_404_NOT_FOUND
    code = "RESOURCE_NOT_FOUND"
    default_message = "Resource not found"


class DuplicateError(AppError):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. duplicate username, duplicate template name within a company).
    """

    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_RESOURCE"
    default_message = "Resource already exists"

    def __init__(self, message: str | None = None, metadata: dict[str, Any] | None = None, code: str | None = None) -> None:
        super().__init__(message, metadata)
        if code is not None:
            self.code = code


class ForbiddenError(AppError):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the authenticated user lacks the required permission level
    (e.g. employee-level user attempting admin-only operations).
    """

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Insufficient permissions"


class UnauthorizedError(AppError):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing JWT token, expired token, invalid credentials).
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class BadRequestError(AppError):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches
    (e.g. mutually exclusive options, invalid state transitions).
    """

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"


# ---------------------------------------------------------------------------
# 근무 엔진 오류 — Shift engine errors
# ---------------------------------------------------------------------------


class InvalidTimeFormatError(AppError):
    """시간 형식 오류 — HH:mm(24시간, 타임존 없음) 형식이 아닐 때.

    Raised when a time string is not zero-padded 24-hour HH:mm
    or carries a timezone marker.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_TIME_FORMAT"

    def __init__(self, field: str = "time", value: str | None = None) -> None:
        super().__init__(
            f"Invalid {field} format. Expected HH:mm (24-hour, UTC, no timezone suffix)",
            {"field": field, "value": value},
        )


class OvernightNotAllowedError(AppError):
    """야간(자정 넘김) 근무 거부 — 종료 시각이 시작 시각보다 늦지 않을 때.

    Raised when end time is not strictly after start time.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    code = "OVERNIGHT_NOT_ALLOWED"

    def __init__(self, start_time: str, end_time: str) -> None:
        super().__init__(
            "Overnight shifts are not allowed: end time must be after start time",
            {"start_time": start_time, "end_time": end_time},
        )


class BusinessRuleViolationError(AppError):
    """회사 규칙 위반 — 일일/주간 근무시간, 휴식시간 규칙 위반.

    Raised when error-severity business rule violations block a write.
    metadata["violations"] lists every violation, warnings included.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    code = "BUSINESS_RULE_VIOLATION"

    def __init__(self, violations: list[dict[str, Any]]) -> None:
        errors = [v["message"] for v in violations if v.get("severity") == "error"]
        super().__init__(
            "; ".join(errors) or "Business rule violation",
            {"violations": violations},
        )


class UnauthorizedCompanyAccessError(AppError):
    """다른 회사 리소스 접근 — 멀티테넌시 위반.

    Raised when an employee, shift or template id resolves to another company.
    The payload never includes the foreign record.
    """

    status_code = status.HTTP_403_FORBIDDEN
    code = "UNAUTHORIZED_COMPANY_ACCESS"

    def __init__(self, resource: str = "resource") -> None:
        super().__init__(f"Access to this {resource} is not allowed for your company")


class ShiftOverlapError(AppError):
    """근무 시간 겹침 — 기존 근무와 반개구간이 교차할 때.

    Raised when a candidate shift intersects an existing shift.
    """

    status_code = status.HTTP_409_CONFLICT
    code = "SHIFT_OVERLAP"

    def __init__(self, analysis: dict[str, Any]) -> None:
        super().__init__("Shift overlaps with an existing shift", {"conflict": analysis})


class ShiftDuplicateError(AppError):
    """동일 근무 중복 — 같은 직원/날짜/시작/종료 근무가 이미 존재.

    Raised by the pre-check and by the storage uniqueness constraint alike,
    so callers see a single error shape for both paths.
    """

    status_code = status.HTTP_409_CONFLICT
    code = "SHIFT_DUPLICATE"

    def __init__(self, metadata: dict[str, Any] | None = None) -> None:
        super().__init__("An identical shift already exists for this employee and date", metadata)


class DuplicationConflictsDetectedError(AppError):
    """근무 복제 충돌 — fail 전략에서 하나라도 충돌이 있을 때."""

    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATION_CONFLICTS_DETECTED"

    def __init__(self, conflicts: list[dict[str, Any]]) -> None:
        super().__init__(
            f"Duplication aborted: {len(conflicts)} conflict(s) detected",
            {"conflicts": conflicts, "conflict_count": len(conflicts)},
        )


class BulkCreationConflictsDetectedError(AppError):
    """일괄 생성 충돌 — fail 전략에서 하나라도 충돌이 있을 때."""

    status_code = status.HTTP_409_CONFLICT
    code = "BULK_CREATION_CONFLICTS_DETECTED"

    def __init__(self, conflicts: list[dict[str, Any]]) -> None:
        super().__init__(
            f"Bulk creation aborted: {len(conflicts)} conflict(s) detected",
            {"conflicts": conflicts, "conflict_count": len(conflicts)},
        )


class TransactionFailedError(AppError):
    """트랜잭션 실패 — 예상치 못한 저장소 오류 (내부 정보 비노출)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "TRANSACTION_FAILED"
    default_message = "The operation could not be completed. No changes were saved"
