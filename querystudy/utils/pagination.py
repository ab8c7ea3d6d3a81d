"""페이지네이션 유틸리티 모듈.

Pagination utility module for SQLAlchemy async queries.
Provides the page request/response models, a count-skipping page
builder, and a generic always-count paginate function.
"""

import math
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from querystudy.config import settings

T = TypeVar("T")


class PageRequest(BaseModel):
    """페이지 요청 — 페이지 번호(1부터)와 페이지 크기.

    Page request: 1-based page number plus page size.
    """

    page: int = Field(default=1, ge=1)  # 현재 페이지 번호 — 1부터 시작 (1-indexed)
    per_page: int = Field(default=settings.DEFAULT_PER_PAGE, ge=1)  # 페이지당 항목 수 (Items per page)

    @property
    def offset(self) -> int:
        """시작 행 인덱스 (Starting row index)."""
        return (self.page - 1) * self.per_page


class Page(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Pagination result model for typed responses.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
        pages: 전체 페이지 수 (Total number of pages)
    """

    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int  # ceil(total / per_page)

    @classmethod
    def build(cls, items: Sequence[T], total: int, page_request: PageRequest) -> "Page[T]":
        """항목과 전체 개수로 페이지를 구성합니다.

        Assemble a page from its items and the total count.
        """
        return cls(
            items=list(items),
            total=total,
            page=page_request.page,
            per_page=page_request.per_page,
            pages=math.ceil(total / page_request.per_page),
        )


async def get_page(
    content: Sequence[T],
    page_request: PageRequest,
    count_query: Callable[[], Awaitable[int]],
    count_shortcut: bool = True,
) -> Page[T]:
    """조회된 페이지 내용으로 페이지를 만들고, 필요할 때만 카운트 쿼리를 실행합니다.

    Build a page from already-fetched content, running the count query
    only when the total cannot be inferred. When the first page comes
    back shorter than the page size it is also the last page, so the
    total equals the number of fetched rows and count_query is never awaited.

    Args:
        content: 조회된 현재 페이지 항목 (Fetched page content)
        page_request: 페이지 요청 (Page request)
        count_query: 전체 개수를 반환하는 코루틴 팩토리
                     (Zero-argument callable returning an awaitable total)
        count_shortcut: False이면 항상 카운트 쿼리 실행
                        (Always run the count query when False)

    Returns:
        Page[T]: 페이지 결과 (Assembled page)
    """
    if count_shortcut and page_request.offset == 0 and len(content) < page_request.per_page:
        return Page.build(content, len(content), page_request)

    total: int = await count_query()
    return Page.build(content, total, page_request)


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page_request: PageRequest,
    count_query: Select[Any] | None = None,
    scalars: bool = False,
) -> tuple[Sequence[Any], int]:
    """SQLAlchemy 쿼리에 대한 페이지네이션을 수행합니다.

    Execute a paginated SQLAlchemy query, returning rows and total count.
    Always runs two queries: one for the total count and one for the
    page of rows with OFFSET/LIMIT.

    Args:
        db: 비동기 DB 세션 (Async database session)
        query: SQLAlchemy Select 쿼리 (Base query to paginate)
        page_request: 페이지 요청 (Page request)
        count_query: 전용 카운트 쿼리, 없으면 서브쿼리로 계산
                     (Dedicated count query; defaults to COUNT over a subquery)
        scalars: True이면 첫 번째 컬럼만 반환 (엔티티 조회 시 모델 객체 목록)
                 (Return the first column of each row, e.g. model instances for an
                 entity select; otherwise Row tuples)

    Returns:
        tuple[Sequence[Any], int]: (행 목록, 전체 개수) 튜플
            (Tuple of page rows and total count)
    """
    if count_query is None:
        # 서브쿼리로 감싸서 COUNT 실행 (Count total via subquery)
        count_query = select(func.count()).select_from(query.subquery())
    total: int = (await db.execute(count_query)).scalar() or 0

    # 페이지 항목 조회 — OFFSET/LIMIT 적용 (Fetch page rows with offset/limit)
    result = await db.execute(query.offset(page_request.offset).limit(page_request.per_page))
    rows: Sequence[Any] = result.scalars().all() if scalars else result.all()

    return rows, total
