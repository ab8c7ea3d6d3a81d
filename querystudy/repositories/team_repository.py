"""팀 레포지토리 — 팀 조회 쿼리.

Team Repository — Lookup queries for teams.
"""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.models.team import Team
from querystudy.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):

    def __init__(self) -> None:
        super().__init__(Team)

    async def get_by_name(
        self,
        db: AsyncSession,
        name: str,
    ) -> Team | None:
        """이름으로 팀을 조회합니다 (Retrieve a team by its name)."""
        query: Select = select(Team).where(Team.name == name).order_by(Team.id).limit(1)
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
team_repository: TeamRepository = TeamRepository()
