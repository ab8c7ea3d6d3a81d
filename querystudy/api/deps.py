"""FastAPI 의존성 주입 모듈 — 검색 조건 및 페이지 요청 파싱.

FastAPI dependency injection module.
Builds the member search condition and page request from query parameters.
"""

from typing import Annotated

from fastapi import Query

from querystudy.config import settings
from querystudy.schemas.member import MemberSearchCondition
from querystudy.utils.pagination import PageRequest


def get_search_condition(
    username: Annotated[str | None, Query()] = None,
    team_name: Annotated[str | None, Query()] = None,
    age_goe: Annotated[int | None, Query()] = None,
    age_loe: Annotated[int | None, Query()] = None,
) -> MemberSearchCondition:
    """쿼리 파라미터로 회원 검색 조건을 만듭니다.

    Build a MemberSearchCondition from query parameters.
    Missing parameters stay None and are not applied as filters.
    """
    return MemberSearchCondition(
        username=username,
        team_name=team_name,
        age_goe=age_goe,
        age_loe=age_loe,
    )


def get_page_request(
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=settings.MAX_PER_PAGE)] = settings.DEFAULT_PER_PAGE,
) -> PageRequest:
    """쿼리 파라미터로 페이지 요청을 만듭니다 (page는 1부터 시작).

    Build a PageRequest from query parameters (page is 1-based).
    """
    return PageRequest(page=page, per_page=per_page)
