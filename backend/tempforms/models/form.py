from datetime import datetime

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tempforms.core.database import Base, UTCDateTime


class Form(Base):
    """Temporary form definition with a JSON fields array.

    Each field in the fields array is a dict:
        {
            "id": "field_Ab3dE9xZ",
            "type": "text" | "textarea" | "multiple-choice" | "yes-no" | "rating",
            "label": "Question text",
            "required": true/false,
            "options": [{"id": ..., "label": ..., "value": ...}],  # multiple-choice only
            "min_rating": 1, "max_rating": 5,                     # rating only
            "order": 0
        }

    The row is logically gone once ``expires_at`` has passed, whether or not the
    reclamation sweep has deleted it yet.
    """

    __tablename__ = "forms"
    __table_args__ = (
        Index("ix_forms_fill_link", "fill_link", unique=True),
        Index("ix_forms_response_link", "response_link", unique=True),
        Index("ix_forms_expires_at", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    fill_link: Mapped[str] = mapped_column(String(12), nullable=False)
    response_link: Mapped[str] = mapped_column(String(32), nullable=False)
    response_secret: Mapped[str | None] = mapped_column(String(255))
    expiration_time: Mapped[str] = mapped_column(String(20), nullable=False)
    custom_expiration_minutes: Mapped[int | None] = mapped_column(Integer)
    response_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    responses: Mapped[list["FormResponse"]] = relationship(
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Form {self.title} (expires {self.expires_at.isoformat()})>"
