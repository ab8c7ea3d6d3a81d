"""샘플 데이터 시드 스크립트 — 팀 2개와 회원 생성.

Seed script — Creates two teams and a batch of sample members.
Useful for trying the search endpoints locally.

Usage:
    python -m querystudy.seed

Creates:
    - 2개 팀: teamA, teamB (2 teams)
    - N명 회원: member0 ~ member{N-1}, 나이 = 번호, 짝수는 teamA / 홀수는 teamB
      (N members, age = index, even indexes in teamA and odd in teamB)
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.config import settings
from querystudy.database import async_session, engine, Base
from querystudy.models import Member, Team
from querystudy.repositories.member_repository import member_repository
from querystudy.repositories.team_repository import team_repository


async def init_members(db: AsyncSession, count: int) -> list[Member]:
    """teamA/teamB와 회원 count명을 생성합니다.

    Create teamA, teamB and count members, alternating between the two teams.
    The caller owns the transaction.
    """
    team_a: Team = Team(name="teamA")
    team_b: Team = Team(name="teamB")
    await team_repository.add_all(db, [team_a, team_b])

    members: list[Member] = []
    for i in range(count):
        selected_team: Team = team_a if i % 2 == 0 else team_b
        members.append(Member(username=f"member{i}", age=i, team=selected_team))
    await member_repository.add_all(db, members)
    return members


async def seed(count: int | None = None) -> None:
    """데이터베이스를 샘플 데이터로 시드합니다.

    Create tables if needed, then insert sample teams and members.

    Idempotent: teamA가 이미 있으면 건너뜁니다 (Skips if teamA already exists).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        if await team_repository.get_by_name(db, "teamA") is not None:
            print("Already seeded. Skipping.")
            return

        members = await init_members(db, count if count is not None else settings.INIT_MEMBER_COUNT)
        await db.commit()
        print(f"Seeded 2 teams and {len(members)} members.")


if __name__ == "__main__":
    asyncio.run(seed())
