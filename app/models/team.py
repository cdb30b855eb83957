from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

TEAM_STATUSES = ("active", "inactive")

class Team(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "teams"
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    members_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
