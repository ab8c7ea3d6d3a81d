"""공통 레포지토리 — 모델 단위 조회/저장.

Shared repository base: primary-key lookup and batched inserts for one model.
Domain queries live in the subclasses.
"""

from typing import Generic, Sequence, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(self, db: AsyncSession, record_id: int) -> ModelType | None:
        """기본 키로 조회. identity map에 있으면 쿼리 없이 반환."""
        return await db.get(self.model, record_id)

    async def add_all(self, db: AsyncSession, objs: Sequence[ModelType]) -> Sequence[ModelType]:
        """객체들을 세션에 추가하고 flush해 ID를 할당합니다.

        Add objs to the session and flush so generated ids are populated.
        Committing is left to the caller.
        """
        db.add_all(objs)
        await db.flush()
        return objs
