"""회원 검색 관련 Pydantic 스키마 정의.

Member search Pydantic schema definitions.
Includes the sparse search condition and the read-only projections
returned by the member repository.
"""

from pydantic import BaseModel, ConfigDict


class MemberSearchCondition(BaseModel):
    """회원 검색 조건 스키마 — 모든 필드는 선택 사항.

    Member search condition. Every field is optional; a missing (or empty)
    field means the corresponding filter is not applied.

    Attributes:
        username: 회원 이름 일치 (Exact username match)
        team_name: 팀 이름 일치 (Exact team name match)
        age_goe: 나이 하한, 이상 (Minimum age, inclusive)
        age_loe: 나이 상한, 이하 (Maximum age, inclusive)
    """

    username: str | None = None
    team_name: str | None = None
    age_goe: int | None = None
    age_loe: int | None = None


class MemberTeamDto(BaseModel):
    """회원-팀 평탄화 조회 결과 스키마.

    Flattened member + team row. Team fields are None for members without a team.
    """

    model_config = ConfigDict(from_attributes=True)

    member_id: int
    username: str | None = None
    age: int
    team_id: int | None = None
    team_name: str | None = None


class MemberDto(BaseModel):
    """회원 이름/나이 프로젝션 (Username and age projection)."""

    model_config = ConfigDict(from_attributes=True)

    username: str | None = None
    age: int


class UserDto(BaseModel):
    """별칭 프로젝션 — username을 name으로 매핑.

    Aliased projection: the query labels username as "name".
    """

    model_config = ConfigDict(from_attributes=True)

    name: str | None = None
    age: int | None = None
