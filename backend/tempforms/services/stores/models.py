"""Storage-agnostic form and response records."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

FieldType = Literal["text", "textarea", "multiple-choice", "yes-no", "rating"]
AnswerValue = str | list[str] | bool | int | float


class FieldOption(BaseModel):
    id: str
    label: str
    value: str


class FieldDefinition(BaseModel):
    id: str
    type: FieldType
    label: str
    placeholder: str | None = None
    required: bool = False
    options: list[FieldOption] = Field(default_factory=list)
    min_rating: int = 1
    max_rating: int = 5
    order: int = 0


class FormSettings(BaseModel):
    allow_multiple_responses: bool = True
    show_response_count: bool = True
    require_all_fields: bool = False


class FormRecord(BaseModel):
    id: str
    title: str
    description: str = ""
    fill_link: str
    response_link: str
    response_secret: str | None = None
    fields: list[FieldDefinition]
    expiration_time: str
    custom_expiration_minutes: int | None = None
    created_at: datetime
    expires_at: datetime
    response_count: int = 0
    settings: FormSettings = Field(default_factory=FormSettings)

    @property
    def has_response_secret(self) -> bool:
        return self.response_secret is not None


class ResponseRecord(BaseModel):
    id: str
    form_id: str
    answers: dict[str, AnswerValue]
    submitted_at: datetime
    expires_at: datetime
    submitter_key: str | None = None
