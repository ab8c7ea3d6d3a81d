"""회원 서비스 — 회원 검색 비즈니스 로직.

Member Service — Business logic for member search and lookup.
Delegates query construction to MemberRepository.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.repositories.member_repository import member_repository
from querystudy.schemas.member import MemberSearchCondition, MemberTeamDto
from querystudy.utils.exceptions import NotFoundError
from querystudy.utils.pagination import Page, PageRequest


class MemberService:
    """회원 관련 비즈니스 로직을 처리하는 서비스.

    Service handling member search business logic.
    """

    async def search_members(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
    ) -> list[MemberTeamDto]:
        """조건에 맞는 회원 목록을 조회합니다 (List members matching the condition)."""
        return await member_repository.search(db, condition)

    async def search_page_simple(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page_request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """카운트 생략 최적화가 적용된 페이지 검색.

        Paged search with the count-skipping optimisation.
        """
        return await member_repository.search_page_simple(db, condition, page_request)

    async def search_page_complex(
        self,
        db: AsyncSession,
        condition: MemberSearchCondition,
        page_request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """카운트 쿼리를 항상 실행하는 페이지 검색.

        Paged search that always runs the count query.
        """
        return await member_repository.search_page_complex(db, condition, page_request)

    async def get_member(
        self,
        db: AsyncSession,
        member_id: int,
    ) -> MemberTeamDto:
        """회원 단건을 팀 정보와 함께 조회합니다.

        Retrieve a single member with its team.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            member_id: 회원 ID (Member id)

        Returns:
            MemberTeamDto: 회원-팀 조회 결과 (Member/team row)

        Raises:
            NotFoundError: 회원을 찾을 수 없을 때 (Member not found)
        """
        member: MemberTeamDto | None = await member_repository.get_member_team(db, member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member


# 싱글턴 인스턴스 — Singleton instance
member_service: MemberService = MemberService()
