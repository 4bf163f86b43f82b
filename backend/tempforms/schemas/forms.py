from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from tempforms.core import config
from tempforms.services.stores.models import AnswerValue, FieldType


class CamelModel(BaseModel):
    """JSON bodies use camelCase; snake_case is accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------------------------------------------------------
# Field schemas
# ---------------------------------------------------------------------------


class FieldOptionIn(CamelModel):
    id: str | None = Field(None, max_length=64)
    label: str = Field(..., min_length=1, max_length=100)
    value: str | None = Field(None, max_length=100, description="Defaults to the label")


class FieldIn(CamelModel):
    """Single field in a form."""

    id: str | None = Field(None, max_length=64, description="Generated when omitted")
    type: FieldType
    label: str = Field(..., min_length=1, max_length=200)
    placeholder: str | None = Field(None, max_length=100)
    required: bool = False
    options: list[FieldOptionIn] | None = Field(
        None,
        description="Answer options (required for multiple-choice, ignored for others)",
    )
    min_rating: int = Field(1, ge=1, le=10)
    max_rating: int = Field(5, ge=1, le=10)

    @model_validator(mode="after")
    def _check_type_constraints(self) -> "FieldIn":
        if self.type == "multiple-choice":
            count = len(self.options or [])
            if count < 2 or count > 20:
                raise ValueError("multiple-choice fields must have between 2 and 20 options")
        if self.type == "rating" and self.min_rating >= self.max_rating:
            raise ValueError("minRating must be lower than maxRating")
        return self


class FieldOptionOut(CamelModel):
    id: str
    label: str
    value: str


class FieldOut(CamelModel):
    id: str
    type: FieldType
    label: str
    placeholder: str | None
    required: bool
    options: list[FieldOptionOut]
    min_rating: int
    max_rating: int
    order: int


class FormSettingsSchema(CamelModel):
    allow_multiple_responses: bool = True
    show_response_count: bool = True
    require_all_fields: bool = False


# ---------------------------------------------------------------------------
# Form schemas
# ---------------------------------------------------------------------------


class FormCreate(CamelModel):
    # Only the display text is trimmed; the response password is kept byte-exact
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    description: Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)] | None = None
    fields: list[FieldIn] = Field(..., min_length=1, max_length=50)
    expiration_time: str = Field(..., description="15min | 30min | 1hour | 24hours | custom")
    custom_expiration_minutes: StrictInt | None = None
    response_password: str | None = Field(
        None,
        min_length=config.settings.RESPONSE_PASSWORD_MIN_LENGTH,
        max_length=config.settings.RESPONSE_PASSWORD_MAX_LENGTH,
    )
    settings: FormSettingsSchema = Field(default_factory=FormSettingsSchema)


class FormCreated(CamelModel):
    """Returned once to the creator — the only time both links are shown together."""

    id: str
    title: str
    description: str
    fill_link: str
    response_link: str
    expiration_time: str
    created_at: datetime
    expires_at: datetime
    fields: list[FieldOut]
    settings: FormSettingsSchema
    has_response_password: bool


class PublicForm(CamelModel):
    id: str
    title: str
    description: str
    fields: list[FieldOut]
    settings: FormSettingsSchema
    created_at: datetime
    expires_at: datetime
    time_remaining: str
    is_about_to_expire: bool
    response_count: int | None = Field(None, description="Null when the creator hides the count")


class FormInfo(CamelModel):
    """Summary of a live form; expired forms are answered 410 instead."""

    title: str
    description: str
    time_remaining: str
    response_count: int | None
    allows_multiple_responses: bool
    created_at: datetime
    expires_at: datetime


class FormDelete(CamelModel):
    response_link: str | None = Field(None, description="Proof of ownership")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ResponseSubmission(CamelModel):
    """Answers keyed by field id; null or empty means unanswered."""

    answers: dict[str, AnswerValue | None]


class ResponseSubmitted(CamelModel):
    id: str
    submitted_at: datetime
    answers: dict[str, AnswerValue]


class ResponseOut(CamelModel):
    id: str
    submitted_at: datetime
    answers: dict[str, AnswerValue]
    formatted_answers: dict[str, str] = Field(
        default_factory=dict,
        description="Field label -> display value, in field order",
    )


class ResponseStatistics(CamelModel):
    total_responses: int
    first_response: datetime | None
    last_response: datetime | None


class ResponseFormView(CamelModel):
    id: str
    title: str
    description: str
    fill_link: str
    fields: list[FieldOut]
    created_at: datetime
    expires_at: datetime
    time_remaining: str
    response_count: int


class ResponsesView(CamelModel):
    form: ResponseFormView
    responses: list[ResponseOut]
    statistics: ResponseStatistics


class PasswordCheck(CamelModel):
    password: str = Field(..., min_length=1, max_length=config.settings.RESPONSE_PASSWORD_MAX_LENGTH)


class PasswordCheckResult(CamelModel):
    password_valid: bool


class ResponsesDelete(CamelModel):
    response_ids: list[str] = Field(..., min_length=1)
    password: str | None = None


class ResponsesDeleted(CamelModel):
    deleted: int


ExportFormat = Literal["csv", "json"]
