"""회원 SQLAlchemy ORM 모델 정의.

Member SQLAlchemy ORM model definition.

Tables:
    - members: 팀에 소속될 수 있는 회원 (Member, optionally assigned to a team)
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from querystudy.database import Base
from querystudy.models.team import Team


class Member(Base):
    """회원 모델 — 팀과 다대일 관계.

    Member model — Many-to-one relationship with Team.
    A member may exist without a team (team_id is nullable).

    Attributes:
        id: 고유 식별자 (Auto-increment identifier)
        username: 회원 이름, 없을 수 있음 (Member name, optional)
        age: 나이 (Age)
        team_id: 소속 팀 FK (Owning team foreign key, optional)

    Relationships:
        team: 소속 팀, 지연 로딩 (Owning team, lazily loaded)
    """

    __tablename__ = "members"

    # 회원 고유 식별자 — Member unique identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 회원 이름 — Member display name (nullable)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 나이 — Member age
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    # 소속 팀 FK — Owning team (NULL when the member has no team)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True, index=True)

    # 관계 — Relationships
    team = relationship("Team", back_populates="members")

    def change_team(self, team: Team) -> None:
        """소속 팀을 변경합니다. 양방향 관계는 back_populates가 동기화합니다.

        Move this member to another team; back_populates keeps team.members in sync.
        """
        self.team = team

    def __repr__(self) -> str:
        # team은 지연 로딩이므로 출력하지 않음 — team is lazy, keep it out of repr
        return f"Member(id={self.id}, username={self.username}, age={self.age})"
