"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates all endpoints into a single router
for inclusion in the FastAPI application.

Included routers:
    - members: 회원 조건 검색/페이지 검색 (Member search and paged search)
"""

from fastapi import APIRouter

from querystudy.api.members import router as members_router

api_router: APIRouter = APIRouter()

api_router.include_router(members_router, tags=["Members"])
