"""회원 레포지토리 — 동적 조건 검색, 페이징, 벌크 연산 쿼리.

Member Repository — Conditional search, paging, and bulk queries for members.

Search conditions are built from a sparse MemberSearchCondition: each
candidate filter is a helper that returns a predicate or None, and only
the non-None predicates are combined with AND. Every search left-joins
Team so that members without a team are still returned.
"""

from sqlalchemy import ColumnElement, Select, and_, delete, func, select, true, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from querystudy.config import settings
from querystudy.models.member import Member
from querystudy.models.team import Team
from querystudy.repositories.base import BaseRepository
from querystudy.schemas.member import MemberDto, MemberSearchCondition, MemberTeamDto, UserDto
from querystudy.utils.pagination import Page, PageRequest, get_page, paginate


def _has_text(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def username_eq(username: str | None) -> ColumnElement[bool] | None:
    """회원 이름 일치 조건. 값이 없거나 비어 있으면 None."""
    return Member.username == username if _has_text(username) else None


def team_name_eq(team_name: str | None) -> ColumnElement[bool] | None:
    """팀 이름 일치 조건. 값이 없거나 비어 있으면 None."""
    return Team.name == team_name if _has_text(team_name) else None


def age_goe(age: int | None) -> ColumnElement[bool] | None:
    """나이 하한 조건 (age >= value)."""
    return Member.age >= age if age is not None else None


def age_loe(age: int | None) -> ColumnElement[bool] | None:
    """나이 상한 조건 (age <= value)."""
    return Member.age <= age if age is not None else None


def search_conditions(condition: MemberSearchCondition) -> list[ColumnElement[bool]]:
    """검색 조건에서 적용 가능한 조건식만 모아 반환합니다.

    Collect the predicates that apply to the given condition.
    Absent filters are omitted; the caller ANDs the rest via where(*conditions).

    Args:
        condition: 회원 검색 조건 (Member search condition)

    Returns:
        list[ColumnElement[bool]]: 적용할 조건식 목록 (Predicates to AND together)
    """
    predicates = (
        username_eq(condition.username),
        team_name_eq(condition.team_name),
        age_goe(condition.age_goe),
        age_loe(condition.age_loe),
    )
    return [predicate for predicate in predicates if predicate is not None]


def _member_team_query() -> Select:
    # 회원 기준 외부 조인 — 팀이 없는 회원도 포함 (Left join keeps members without a team)
    return (
        select(
            Member.id.label("member_id"),
            Member.username,
            Member.age,
            Team.id.label("team_id"),
            Team.name.label("team_name"),
        )
        .select_from(Member)
        .outerjoin(Member.team)
    )


def _count_query(conditions: list[ColumnElement[bool]]) -> Select:
    return (
        select(func.count(Member.id))
        .select_from(Member)
        .outerjoin(Member.team)
        .where(*conditions)
    )


class MemberRepository(BaseRepository[Member]):
    """회원 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the members table.
    """

    def __init__(self) -> None:
        super().__init__(Member)

    async def search(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> list[MemberTeamDto]:
        """조건에 맞는 회원을 팀 정보와 함께 조회합니다.

        Retrieve members matching the condition, flattened with their team.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            condition: 회원 검색 조건 (Member search condition)

        Returns:
            list[MemberTeamDto]: 회원-팀 조회 결과 (Member/team rows)
        """
        query: Select = (
            _member_team_query()
            .where(*search_conditions(condition))
            .order_by(Member.id)
        )
        result = await db.execute(query)
        return [MemberTeamDto(**row._mapping) for row in result.all()]

    async def _fetch_content(
        self,
        db: AsyncSession,
        conditions: list[ColumnElement[bool]],
        page_request: PageRequest,
    ) -> list[MemberTeamDto]:
        query: Select = (
            _member_team_query()
            .where(*conditions)
            .order_by(Member.id)
            .offset(page_request.offset)
            .limit(page_request.per_page)
        )
        result = await db.execute(query)
        return [MemberTeamDto(**row._mapping) for row in result.all()]

    async def _count(
        self,
        db: AsyncSession,
        conditions: list[ColumnElement[bool]],
    ) -> int:
        return (await db.execute(_count_query(conditions))).scalar() or 0

    async def search_page_simple(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page_request: PageRequest,
        count_shortcut: bool | None = None,
    ) -> Page[MemberTeamDto]:
        """조건 검색 결과를 페이지 단위로 조회합니다. 카운트 쿼리는 필요할 때만 실행.

        Paged search that skips the count query when the first page comes
        back shorter than the page size (the total is then the page length).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            condition: 회원 검색 조건 (Member search condition)
            page_request: 페이지 요청 (Page request)
            count_shortcut: 카운트 생략 허용 여부, None이면 설정값 사용
                            (Allow skipping the count; None uses PAGE_COUNT_SHORTCUT)

        Returns:
            Page[MemberTeamDto]: 페이지 결과 (Page of member/team rows)
        """
        if count_shortcut is None:
            count_shortcut = settings.PAGE_COUNT_SHORTCUT

        conditions = search_conditions(condition)
        content = await self._fetch_content(db, conditions, page_request)
        return await get_page(
            content,
            page_request,
            lambda: self._count(db, conditions),
            count_shortcut=count_shortcut,
        )

    async def search_page_complex(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page_request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """조건 검색 결과를 페이지 단위로 조회합니다. 카운트 쿼리를 항상 실행.

        Paged search that always runs both the content and the count query.
        """
        conditions = search_conditions(condition)
        query: Select = _member_team_query().where(*conditions).order_by(Member.id)
        rows, total = await paginate(db, query, page_request, _count_query(conditions))
        return Page.build([MemberTeamDto(**row._mapping) for row in rows], total, page_request)

    async def get_member_team(
        self,
        db: AsyncSession,
        member_id: int,
    ) -> MemberTeamDto | None:
        """단일 회원을 팀 정보와 함께 조회합니다."""
        result = await db.execute(_member_team_query().where(Member.id == member_id))
        row = result.one_or_none()
        return MemberTeamDto(**row._mapping) if row is not None else None

    async def find_by_username(
        self,
        db: AsyncSession,
        username: str,
    ) -> list[Member]:
        """이름으로 회원 목록을 조회합니다 (Members with the given username)."""
        result = await db.execute(
            select(Member).where(Member.username == username).order_by(Member.id)
        )
        return list(result.scalars().all())

    async def search_members(
        self,
        db: AsyncSession,
        username: str | None = None,
        age: int | None = None,
    ) -> list[Member]:
        """조건을 하나의 식으로 누적하는 방식의 동적 검색.

        Dynamic search that accumulates conditions into a single AND
        expression, starting from TRUE. Equivalent to passing the
        optional predicates to where() individually.
        """
        builder: ColumnElement[bool] = true()
        if username is not None:
            builder = and_(builder, Member.username == username)
        if age is not None:
            builder = and_(builder, Member.age == age)

        result = await db.execute(select(Member).where(builder).order_by(Member.id))
        return list(result.scalars().all())

    async def find_member_dtos(self, db: AsyncSession) -> list[MemberDto]:
        """회원 이름/나이를 DTO로 조회합니다 (Username/age projection)."""
        result = await db.execute(
            select(Member.username, Member.age).order_by(Member.id)
        )
        return [MemberDto(**row._mapping) for row in result.all()]

    async def find_user_dtos(self, db: AsyncSession) -> list[UserDto]:
        """이름 별칭과 최대 나이 서브쿼리를 사용한 프로젝션.

        Projection labelling username as "name" and filling age with the
        maximum member age from a scalar subquery.
        """
        member_sub = aliased(Member)
        max_age = select(func.max(member_sub.age)).scalar_subquery()
        result = await db.execute(
            select(Member.username.label("name"), max_age.label("age")).order_by(Member.id)
        )
        return [UserDto(**row._mapping) for row in result.all()]

    # -----------------------------------------------------------------------
    # 벌크 연산 — Bulk operations
    # 영향받은 행의 키를 DB에서 받아 세션의 회원 객체에도 반영 (삭제 대상은 세션에서 제거)
    # Affected rows are fetched back so loaded members match the database; deleted ones leave the session
    # -----------------------------------------------------------------------

    async def bulk_rename_younger_than(
        self,
        db: AsyncSession,
        age: int,
        username: str,
    ) -> int:
        """나이가 기준보다 어린 회원의 이름을 일괄 변경합니다.

        Rename every member younger than age. Returns the affected row count.
        """
        stmt = (
            update(Member)
            .where(Member.age < age)
            .values(username=username)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        return result.rowcount

    async def bulk_add_age(self, db: AsyncSession, amount: int) -> int:
        """모든 회원의 나이에 amount를 더합니다 (Add amount to every member's age)."""
        stmt = (
            update(Member)
            .values(age=Member.age + amount)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        return result.rowcount

    async def bulk_delete_older_than(self, db: AsyncSession, age: int) -> int:
        """나이가 기준보다 많은 회원을 일괄 삭제합니다 (Delete members older than age)."""
        stmt = (
            delete(Member)
            .where(Member.age > age)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        return result.rowcount


# 싱글턴 인스턴스 — Singleton instance
member_repository: MemberRepository = MemberRepository()
