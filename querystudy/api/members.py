"""회원 검색 라우터 — 조건 검색 및 페이지 검색 엔드포인트.

Member search router — Conditional search and paged search endpoints.

Endpoints:
    - GET /v1/members: 전체 조건 검색 (Unpaged search)
    - GET /v2/members: 페이지 검색, 카운트 생략 최적화 (Paged, count may be skipped)
    - GET /v3/members: 페이지 검색, 카운트 항상 실행 (Paged, count always runs)
    - GET /v1/members/{member_id}: 회원 단건 조회 (Single member lookup)
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.api.deps import get_page_request, get_search_condition
from querystudy.database import get_db
from querystudy.schemas.member import MemberSearchCondition, MemberTeamDto
from querystudy.services.member_service import member_service
from querystudy.utils.pagination import Page, PageRequest

router: APIRouter = APIRouter()


@router.get("/v1/members", response_model=list[MemberTeamDto])
async def search_members(
    condition: Annotated[MemberSearchCondition, Depends(get_search_condition)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[MemberTeamDto]:
    """조건에 맞는 회원 목록을 조회합니다.

    Search members with optional username, team_name, age_goe, age_loe filters.
    """
    return await member_service.search_members(db, condition)


@router.get("/v2/members", response_model=Page[MemberTeamDto])
async def search_members_page_simple(
    condition: Annotated[MemberSearchCondition, Depends(get_search_condition)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Page[MemberTeamDto]:
    """페이지 검색 — 첫 페이지가 덜 찼으면 카운트 쿼리를 생략합니다.

    Paged search; the count query is skipped when the first page is short.
    """
    return await member_service.search_page_simple(db, condition, page_request)


@router.get("/v3/members", response_model=Page[MemberTeamDto])
async def search_members_page_complex(
    condition: Annotated[MemberSearchCondition, Depends(get_search_condition)],
    page_request: Annotated[PageRequest, Depends(get_page_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Page[MemberTeamDto]:
    """페이지 검색 — 카운트 쿼리를 항상 실행합니다.

    Paged search; the count query always runs.
    """
    return await member_service.search_page_complex(db, condition, page_request)


@router.get("/v1/members/{member_id}", response_model=MemberTeamDto)
async def get_member(
    member_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MemberTeamDto:
    """회원 단건을 팀 정보와 함께 조회합니다. 없으면 404."""
    return await member_service.get_member(db, member_id)
