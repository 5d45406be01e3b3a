"""회사 소유권 검증 헬퍼 — 멀티테넌시 경계.

Tenancy guard shared by the shift, template and employee services.
Records are looked up without company scoping so that an id belonging to
another company is reported as UNAUTHORIZED_COMPANY_ACCESS (403) instead of
being indistinguishable from a missing record.
"""

from typing import Iterable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.base import BaseRepository
from app.utils.exceptions import NotFoundError, UnauthorizedCompanyAccessError

T = TypeVar("T")


def ensure_same_company(record, company_id: UUID, label: str) -> None:
    """레코드가 요청자의 회사 소속인지 확인합니다.

    Raises:
        UnauthorizedCompanyAccessError: 다른 회사 레코드일 때 (Foreign record)
    """
    if record.company_id != company_id:
        raise UnauthorizedCompanyAccessError(label)


async def get_owned_or_raise(
    repo: BaseRepository[T],
    db: AsyncSession,
    record_id: UUID,
    company_id: UUID,
    label: str,
) -> T:
    """ID로 조회 후 소유 회사를 검증합니다.

    Load a live record by id and check it belongs to ``company_id``.

    Args:
        repo: 조회할 레포지토리 (Repository of the record type)
        db: 비동기 데이터베이스 세션 (Async database session)
        record_id: 레코드 UUID (Record UUID)
        company_id: 요청자 회사 UUID (Caller's company UUID)
        label: 오류 메시지용 리소스 이름 (Resource name for error messages)

    Returns:
        T: 조회된 레코드 (The record)

    Raises:
        NotFoundError: 없거나 삭제된 레코드 (Missing or soft-deleted)
        UnauthorizedCompanyAccessError: 다른 회사 레코드 (Belongs to another company)
    """
    record = await repo.get_by_id(db, record_id)
    if record is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    ensure_same_company(record, company_id, label)
    return record


def ensure_all_owned(
    records: Sequence[T],
    requested_ids: Iterable[UUID],
    company_id: UUID,
    label: str,
) -> dict[UUID, T]:
    """일괄 조회 결과 검증 — 누락 ID는 404, 다른 회사 소속은 403.

    Check a batch lookup: every requested id must be found and owned.
    Returns the records keyed by id.
    """
    by_id = {record.id: record for record in records}
    missing = [str(rid) for rid in requested_ids if rid not in by_id]
    if missing:
        raise NotFoundError(f"{label.capitalize()} not found", {"missing_ids": missing})
    for record in records:
        ensure_same_company(record, company_id, label)
    return by_id
