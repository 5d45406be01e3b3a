"""기본 CRUD 레포지토리 — 모든 레포지토리의 부모 클래스.

Base CRUD Repository — Parent class for all domain repositories.
Provides generic Create, Read, Update, soft/hard Delete operations with
company scoping and soft-delete awareness.

Usage:
    class ShiftTemplateRepository(BaseRepository[ShiftTemplate]):
        def __init__(self) -> None:
            super().__init__(ShiftTemplate)
"""

from datetime import datetime, timezone
from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.
    Queries are scoped by company_id when the model has that column, and
    rows with a non-NULL deleted_at are hidden unless asked for.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    @property
    def soft_deletable(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _scoped(self, query: Select, company_id: UUID | None, include_deleted: bool) -> Select:
        # 회사 범위 및 소프트 삭제 필터 — Company scope and soft-delete filter
        if company_id is not None and hasattr(self.model, "company_id"):
            query = query.where(self.model.company_id == company_id)
        if not include_deleted and self.soft_deletable:
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        company_id: UUID | None = None,
        include_deleted: bool = False,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            company_id: 회사 범위 필터, None이면 회사 필터 미적용
                        (Company scope filter; None skips company filtering)
            include_deleted: 소프트 삭제 레코드 포함 여부 (Include soft-deleted rows)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)
        query = self._scoped(query, company_id, include_deleted)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """페이지네이션이 적용된 레코드 목록을 조회합니다.

        Retrieve a paginated list of records.

        Returns:
            tuple[Sequence[ModelType], int]: (레코드 목록, 전체 개수)
                                             (List of records, total count)
        """
        # 전체 카운트 쿼리 — Total count query
        count_query: Select = select(func.count()).select_from(query.subquery())
        total: int = (await db.execute(count_query)).scalar() or 0

        # 오프셋 계산 및 페이지 적용 — Calculate offset and apply pagination
        offset: int = (page - 1) * per_page
        result = await db.execute(query.offset(offset).limit(per_page))
        items: Sequence[ModelType] = result.scalars().all()

        return items, total

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record, flush it and return it refreshed.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        update_data: dict[str, Any],
    ) -> ModelType:
        """이미 조회된 레코드에 변경 사항을 적용합니다.

        Apply the given fields to an already-loaded record and flush.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            db_obj: 수정할 레코드 (Loaded record to modify)
            update_data: 업데이트할 필드와 값의 딕셔너리
                         (Fields to update; None values are applied as-is)

        Returns:
            ModelType: 업데이트된 레코드 (Updated record)
        """
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def soft_delete(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """소프트 삭제 — deleted_at을 현재 UTC 시각으로 설정합니다."""
        db_obj.deleted_at = datetime.now(timezone.utc)
        await db.flush()
        return db_obj
