"""AppState SQLAlchemy model — one JSON document per storage namespace."""
from datetime import datetime, timezone

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from houselyzer.database import Base


class AppState(Base):
    __tablename__ = "app_state"

    key: Mapped[str] = mapped_column(String(100), primary_key=True, comment="Storage namespace, e.g. houselyzer-storage")
    payload: Mapped[dict] = mapped_column(JSON, default=dict, comment="Serialized StoreSnapshot")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<AppState(key='{self.key}')>"
