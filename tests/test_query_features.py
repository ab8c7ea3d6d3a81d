"""SQLAlchemy 쿼리 기능 테스트 — 조인, 서브쿼리, 프로젝션, 벌크 연산, SQL 함수.

SQLAlchemy query feature tests over the Member/Team model:
joins, eager vs lazy loading, subqueries, CASE, projections,
aggregation, ordering, bulk updates, and SQL functions.
"""

from sqlalchemy import String, case, cast, func, inspect, literal, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, joinedload

from querystudy.models import Member, Team
from tests.conftest import usernames


class TestBasics:
    """기본 조회 테스트."""

    async def test_raw_sql(self, db: AsyncSession, members):
        """문자열 SQL로 member1 조회."""
        result = await db.execute(
            text("SELECT username FROM members WHERE username = :username"),
            {"username": "member1"},
        )
        assert result.scalar_one() == "member1"

    async def test_orm_select(self, db: AsyncSession, members):
        result = await db.execute(select(Member).where(Member.username == "member1"))
        assert result.scalar_one().username == "member1"

    async def test_chained_and_vs_where_args(self, db: AsyncSession, members):
        """and 연결과 where 인자 나열은 같은 결과."""
        chained = await db.execute(
            select(Member).where((Member.username == "member1") & (Member.age == 10))
        )
        args = await db.execute(
            select(Member).where(Member.username == "member1", Member.age == 10)
        )
        assert chained.scalar_one() is args.scalar_one()

    async def test_sort_nulls_last(self, db: AsyncSession, members):
        """나이 내림차순, 이름 오름차순, 이름 없으면 마지막."""
        db.add_all([
            Member(username=None, age=100),
            Member(username="member5", age=100),
            Member(username="member6", age=100),
        ])
        await db.flush()

        result = await db.execute(
            select(Member)
            .where(Member.age == 100)
            .order_by(Member.age.desc(), Member.username.asc().nulls_last())
        )
        assert usernames(result.scalars().all()) == ["member5", "member6", None]

    async def test_paging(self, db: AsyncSession, members):
        result = await db.execute(
            select(Member).order_by(Member.username.desc()).offset(1).limit(2)
        )
        assert usernames(result.scalars().all()) == ["member3", "member2"]


class TestAggregation:
    """집계 함수 및 그룹화 테스트."""

    async def test_aggregation(self, db: AsyncSession, members):
        result = await db.execute(
            select(
                func.count(Member.id),
                func.sum(Member.age),
                func.avg(Member.age),
                func.min(Member.age),
            )
        )
        count, total, average, minimum = result.one()
        assert count == 4
        assert total == 100
        assert average == 25
        assert minimum == 10

    async def test_group_by_team(self, db: AsyncSession, members):
        """팀 이름과 각 팀의 평균 연령."""
        result = await db.execute(
            select(Team.name, func.avg(Member.age))
            .select_from(Member)
            .join(Member.team)
            .group_by(Team.name)
            .order_by(Team.name)
        )
        assert [(name, avg) for name, avg in result.all()] == [("teamA", 15), ("teamB", 35)]


class TestJoins:
    """조인 테스트."""

    async def test_inner_join(self, db: AsyncSession, members):
        """teamA에 소속된 모든 회원."""
        result = await db.execute(
            select(Member).join(Member.team).where(Team.name == "teamA").order_by(Member.id)
        )
        assert usernames(result.scalars().all()) == ["member1", "member2"]

    async def test_theta_join(self, db: AsyncSession, members):
        """연관관계 없이 회원 이름 = 팀 이름인 회원 조회."""
        db.add_all([Member(username="teamA"), Member(username="teamB")])
        await db.flush()

        result = await db.execute(
            select(Member).where(Member.username == Team.name).order_by(Member.id)
        )
        assert usernames(result.scalars().all()) == ["teamA", "teamB"]

    async def test_join_on_filtering(self, db: AsyncSession, members):
        """팀 이름이 teamA인 팀만 조인, 회원은 모두 조회."""
        result = await db.execute(
            select(Member, Team)
            .outerjoin(Member.team.and_(Team.name == "teamA"))
            .order_by(Member.id)
        )
        rows = result.all()
        assert len(rows) == 4
        assert [team.name if team else None for _, team in rows] == ["teamA", "teamA", None, None]

    async def test_outer_join_without_relationship(self, db: AsyncSession, members):
        """연관관계가 없는 엔티티 외부 조인 — 회원 이름과 팀 이름이 같은 대상."""
        db.add_all([Member(username="teamA"), Member(username="teamB"), Member(username="teamC")])
        await db.flush()

        result = await db.execute(
            select(Member, Team)
            .outerjoin(Team, Member.username == Team.name)
            .order_by(Member.id)
        )
        rows = result.all()
        assert len(rows) == 7
        matched = {member.username: team.name if team else None for member, team in rows}
        assert matched["teamA"] == "teamA"
        assert matched["teamB"] == "teamB"
        assert matched["teamC"] is None
        assert matched["member1"] is None


class TestLoading:
    """지연 로딩과 즉시 로딩(fetch join) 비교."""

    async def test_team_not_loaded_without_eager_option(self, db: AsyncSession, members):
        db.expunge_all()
        result = await db.execute(select(Member).where(Member.username == "member1"))
        member = result.scalar_one()
        assert "team" in inspect(member).unloaded

    async def test_team_loaded_with_joinedload(self, db: AsyncSession, members):
        db.expunge_all()
        result = await db.execute(
            select(Member)
            .options(joinedload(Member.team))
            .where(Member.username == "member1")
        )
        member = result.scalar_one()
        assert "team" not in inspect(member).unloaded
        assert member.team.name == "teamA"


class TestSubqueries:
    """서브쿼리 테스트."""

    async def test_max_age(self, db: AsyncSession, members):
        """나이가 가장 많은 회원."""
        member_sub = aliased(Member)
        result = await db.execute(
            select(Member).where(
                Member.age == select(func.max(member_sub.age)).scalar_subquery()
            )
        )
        assert result.scalar_one().age == 40

    async def test_age_at_least_average(self, db: AsyncSession, members):
        """나이가 평균 이상인 회원."""
        member_sub = aliased(Member)
        result = await db.execute(
            select(Member.age)
            .where(Member.age >= select(func.avg(member_sub.age)).scalar_subquery())
            .order_by(Member.age)
        )
        assert result.scalars().all() == [30, 40]

    async def test_age_in_subquery(self, db: AsyncSession, members):
        member_sub = aliased(Member)
        result = await db.execute(
            select(Member.age)
            .where(Member.age.in_(select(member_sub.age).where(member_sub.age > 10)))
            .order_by(Member.age)
        )
        assert result.scalars().all() == [20, 30, 40]

    async def test_subquery_in_select(self, db: AsyncSession, members):
        member_sub = aliased(Member)
        avg_age = select(func.avg(member_sub.age)).scalar_subquery()
        result = await db.execute(select(Member.username, avg_age).order_by(Member.id))
        rows = result.all()
        assert len(rows) == 4
        assert all(avg == 25 for _, avg in rows)


class TestExpressions:
    """CASE, 상수, 문자열 연결 테스트."""

    async def test_simple_case(self, db: AsyncSession, members):
        result = await db.execute(
            select(
                case(
                    (Member.age == 10, "열 살"),
                    (Member.age == 20, "스무살"),
                    else_="기타",
                )
            ).order_by(Member.id)
        )
        assert result.scalars().all() == ["열 살", "스무살", "기타", "기타"]

    async def test_range_case(self, db: AsyncSession, members):
        result = await db.execute(
            select(
                case(
                    (Member.age.between(0, 20), "0~20살"),
                    (Member.age.between(21, 30), "21~30살"),
                    else_="기타",
                )
            ).order_by(Member.id)
        )
        assert result.scalars().all() == ["0~20살", "0~20살", "21~30살", "기타"]

    async def test_constant(self, db: AsyncSession, members):
        result = await db.execute(
            select(Member.username, literal("A").label("constant")).order_by(Member.id)
        )
        assert [row.constant for row in result.all()] == ["A", "A", "A", "A"]

    async def test_concat(self, db: AsyncSession, members):
        """{username}_{age}"""
        result = await db.execute(
            select(Member.username + "_" + cast(Member.age, String))
            .where(Member.username == "member1")
        )
        assert result.scalar_one() == "member1_10"

    async def test_tuple_projection(self, db: AsyncSession, members):
        result = await db.execute(select(Member.username, Member.age).order_by(Member.id))
        first = result.first()
        assert first.username == "member1"
        assert first.age == 10


class TestSqlFunctions:
    """SQL 함수 호출 테스트."""

    async def test_replace(self, db: AsyncSession, members):
        result = await db.execute(
            select(func.replace(Member.username, "member", "M")).order_by(Member.id)
        )
        assert result.scalars().all() == ["M1", "M2", "M3", "M4"]

    async def test_lower(self, db: AsyncSession, members):
        result = await db.execute(
            select(Member.username).where(Member.username == func.lower(Member.username))
        )
        assert len(result.scalars().all()) == 4


class TestBulkAndIdentityMap:
    """벌크 연산은 identity map을 거치지 않음."""

    async def test_loaded_entities_stay_stale_until_expired(self, db: AsyncSession, members):
        result = await db.execute(
            update(Member)
            .where(Member.age < 28)
            .values(username="비회원")
            .execution_options(synchronize_session=False)
        )
        assert result.rowcount == 2

        # 세션에 이미 있는 객체는 DB 값으로 덮어쓰지 않음
        stale = await db.execute(select(Member).order_by(Member.id))
        assert usernames(stale.scalars().all()) == ["member1", "member2", "member3", "member4"]

        db.expire_all()
        fresh = await db.execute(select(Member).order_by(Member.id))
        assert usernames(fresh.scalars().all()) == ["비회원", "비회원", "member3", "member4"]
