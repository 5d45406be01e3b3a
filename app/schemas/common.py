"""공통 Pydantic 응답 스키마 정의.

Common response envelopes shared by every API domain:
``{"success": true, "data": ...}`` for results, paginated lists, and plain
messages. Error envelopes are produced by the exception handlers in app.main.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """성공 응답 봉투 — Success envelope.

    Attributes:
        success: 항상 True (Always true)
        data: 응답 데이터 (Payload)
    """

    success: bool = True
    data: T


class PaginatedData(BaseModel, Generic[T]):
    """페이지네이션 데이터 — Page of items plus paging metadata.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total item count)
        page: 현재 페이지 — 1부터 시작 (Current page, 1-indexed)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[T]
    total: int
    page: int
    per_page: int


class MessageResponse(BaseModel):
    """단순 메시지 응답 — Plain confirmation message."""

    message: str


def ok(data: Any) -> dict[str, Any]:
    """성공 봉투 생성 헬퍼 — Wrap a payload in the success envelope."""
    return {"success": True, "data": data}
