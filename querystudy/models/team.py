"""팀 SQLAlchemy ORM 모델 정의.

Team SQLAlchemy ORM model definition.

Tables:
    - teams: 회원이 소속되는 팀 (Team that members belong to)
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from querystudy.database import Base


class Team(Base):
    """팀 모델 — 회원 연관관계의 주인이 아닌 쪽.

    Team model — Inverse side of the Member.team relationship.

    Attributes:
        id: 고유 식별자 (Auto-increment identifier)
        name: 팀 이름 (Team name)

    Relationships:
        members: 소속 회원 목록 (Members belonging to this team)
    """

    __tablename__ = "teams"

    # 팀 고유 식별자 — Team unique identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 팀 이름 — Team display name
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # 관계 — Relationships (Member.team이 외래 키를 관리)
    members = relationship("Member", back_populates="team")

    def __repr__(self) -> str:
        return f"Team(id={self.id}, name={self.name})"
