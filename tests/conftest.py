"""테스트 인프라 — 테스트 DB, 세션, httpx 클라이언트, 쿼리 카운터 픽스처.

Test infrastructure — Test database, session, httpx client, and query counter fixtures.
Tests run against TEST_DATABASE_URL (default: in-memory SQLite via aiosqlite).
The schema is created per test so every test starts from an empty database.
"""

import os

# 앱 모듈 임포트 전에 환경 변수 고정 — Pin env before the app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AXIOM_DATASET"] = ""
os.environ["INIT_MEMBERS"] = "false"

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from querystudy.database import Base, get_db  # noqa: E402
from querystudy.main import app  # noqa: E402
from querystudy.models import Member, Team  # noqa: E402

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")


class QueryCounter:
    """실행된 SQL 문을 기록하는 before_cursor_execute 리스너.

    before_cursor_execute listener that records every statement sent to the database.
    """

    def __init__(self) -> None:
        self.statements: list[str] = []

    def __call__(
        self,
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        self.statements.append(statement)

    def reset(self) -> None:
        self.statements.clear()

    @property
    def count_queries(self) -> list[str]:
        return [s for s in self.statements if "count(" in s.lower()]

    @property
    def selects(self) -> list[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith("SELECT")]


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    options: dict[str, Any] = {"echo": False}
    if TEST_DATABASE_URL.startswith("sqlite"):
        # 인메모리 DB를 하나의 연결로 공유 — Share one connection so the in-memory DB survives
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    eng = create_async_engine(TEST_DATABASE_URL, **options)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다. 종료 시 롤백."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def query_counter(engine: AsyncEngine):
    """엔진에서 실행되는 SQL을 기록합니다. 사용 전 reset() 호출."""
    counter = QueryCounter()
    event.listen(engine.sync_engine, "before_cursor_execute", counter)
    yield counter
    event.remove(engine.sync_engine, "before_cursor_execute", counter)


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def teams(db: AsyncSession) -> dict[str, Team]:
    """teamA, teamB를 생성합니다."""
    team_a = Team(name="teamA")
    team_b = Team(name="teamB")
    db.add_all([team_a, team_b])
    await db.flush()
    return {"teamA": team_a, "teamB": team_b}


@pytest_asyncio.fixture
async def members(db: AsyncSession, teams: dict[str, Team]) -> list[Member]:
    """member1~4 (10/teamA, 20/teamA, 30/teamB, 40/teamB)를 생성합니다."""
    rows = [
        ("member1", 10, "teamA"),
        ("member2", 20, "teamA"),
        ("member3", 30, "teamB"),
        ("member4", 40, "teamB"),
    ]
    result = []
    for username, age, team_name in rows:
        member = Member(username=username, age=age, team=teams[team_name])
        db.add(member)
        result.append(member)
    await db.flush()
    return result


@pytest_asyncio.fixture
async def member_without_team(db: AsyncSession) -> Member:
    """팀이 없는 회원을 생성합니다."""
    member = Member(username="loner", age=50)
    db.add(member)
    await db.flush()
    return member


def usernames(rows) -> list[str | None]:
    return [row.username for row in rows]
