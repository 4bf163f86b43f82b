from datetime import datetime

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tempforms.core.database import Base, UTCDateTime


class FormResponse(Base):
    """An anonymous submission to a form.

    The answers field is a JSON dict mapping field id to the answer value:
        {
            "field_Ab3dE9xZ": "Free text here",   # text / textarea
            "field_Qw8rT2yU": ["red", "blue"],     # multiple-choice
            "field_Zx5cV7bN": true,                # yes-no
            "field_Lk3jH6gF": 4                    # rating
        }

    ``expires_at`` is copied from the parent form at submission time.
    """

    __tablename__ = "form_responses"
    __table_args__ = (
        Index("ix_form_responses_form_id", "form_id"),
        Index("ix_form_responses_expires_at", "expires_at"),
        Index("ix_form_responses_form_submitter", "form_id", "submitter_key"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    form_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False
    )
    answers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    submitter_key: Mapped[str | None] = mapped_column(String(64))
    submitted_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    form: Mapped["Form"] = relationship(back_populates="responses")

    def __repr__(self) -> str:
        return f"<FormResponse form={self.form_id} at {self.submitted_at.isoformat()}>"
