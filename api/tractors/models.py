# api/tractors/models.py
from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from db_models.tractor import TractorStatus

TRACTOR_ID_ALIASES = AliasChoices("id", "tractorId", "tractor_id")

# Report windows beyond a century are rejected before any date arithmetic
MAX_DAY_THRESHOLD = 36500
MAX_HISTORY_MONTHS = 1200


class CamelModel(BaseModel):
    """JSON in and out is camelCase; snake_case names are accepted on input too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


def required_text(value: Any, message: str) -> str:
    """Reject missing, non-string and whitespace-only values with ``message``."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()


class TractorFields(CamelModel):
    truck_number: str | None = None
    assigned_plant: str | None = None
    assigned_operator: str | None = None
    status: TractorStatus | None = None
    last_service_date: datetime | None = None
    cleanliness_rating: int | None = Field(default=None, ge=0, le=5)
    has_blower: bool | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    freight: str | None = None

    @field_validator("last_service_date")
    @classmethod
    def store_as_utc(cls, v: datetime | None) -> datetime | None:
        # SQLite keeps the wall clock and drops the offset, so only UTC is persisted
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc)
        return v

    @model_validator(mode="before")
    @classmethod
    def unwrap_tractor(cls, data: Any) -> Any:
        # Asset fields may arrive top-level or nested under "tractor"
        if isinstance(data, dict) and isinstance(data.get("tractor"), dict):
            merged = {k: v for k, v in data.items() if k != "tractor"}
            merged.update(data["tractor"])
            return merged
        return data


class TractorCreate(TractorFields):
    user_id: str = Field(default=None, validate_default=True)

    @field_validator("user_id", mode="before")
    @classmethod
    def check_user_id(cls, v):
        return required_text(v, "User ID is required")


class TractorUpdate(TractorFields):
    id: str = Field(default=None, validation_alias=TRACTOR_ID_ALIASES, validate_default=True)
    user_id: str = Field(default=None, validate_default=True)

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v):
        return required_text(v, "Tractor ID is required")

    @field_validator("user_id", mode="before")
    @classmethod
    def check_user_id(cls, v):
        return required_text(v, "User ID is required")

    def patch(self) -> dict:
        """Only the asset fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, exclude={"id", "user_id"})


class TractorIdRequest(CamelModel):
    id: str = Field(default=None, validation_alias=TRACTOR_ID_ALIASES, validate_default=True)

    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v):
        return required_text(v, "Tractor ID is required")


class VerifyRequest(TractorIdRequest):
    user_id: str | None = None


class HistoryRequest(CamelModel):
    tractor_id: str = Field(default=None, validate_default=True)
    limit: int | None = None

    @field_validator("tractor_id", mode="before")
    @classmethod
    def check_tractor_id(cls, v):
        return required_text(v, "Tractor ID is required")


class OperatorRequest(CamelModel):
    operator_id: str = Field(default=None, validate_default=True)

    @field_validator("operator_id", mode="before")
    @classmethod
    def check_operator_id(cls, v):
        return required_text(v, "Operator ID is required")


class StatusRequest(CamelModel):
    status: TractorStatus


class SearchRequest(CamelModel):
    query: str = Field(default=None, validate_default=True)

    @field_validator("query", mode="before")
    @classmethod
    def check_query(cls, v):
        return required_text(v, "Search query is required")


class NeedingServiceRequest(CamelModel):
    # None means the configured service interval
    day_threshold: int | None = Field(default=None, ge=0, le=MAX_DAY_THRESHOLD)


class CleanlinessHistoryRequest(CamelModel):
    tractor_id: str | None = None
    months: int | None = Field(default=None, ge=0, le=MAX_HISTORY_MONTHS)


class HistoryCreate(CamelModel):
    tractor_id: str = Field(default=None, validate_default=True)
    field_name: str = Field(default=None, validate_default=True)
    old_value: Any = None
    new_value: Any = None
    changed_by: str | None = None

    @field_validator("tractor_id", mode="before")
    @classmethod
    def check_tractor_id(cls, v):
        return required_text(v, "Tractor ID is required")

    @field_validator("field_name", mode="before")
    @classmethod
    def check_field_name(cls, v):
        return required_text(v, "Field name required")

    @field_validator("old_value", "new_value")
    @classmethod
    def as_text(cls, v):
        return None if v is None else str(v)


class TractorRead(CamelModel):
    id: str
    truck_number: str | None = None
    assigned_plant: str | None = None
    assigned_operator: str | None = None
    status: str
    last_service_date: datetime | None = None
    cleanliness_rating: int = 0
    has_blower: bool | None = None
    vin: str | None = None
    make: str | None = None
    model: str | None = None
    year: int | None = None
    freight: str | None = None
    created_at: datetime
    updated_at: datetime
    updated_last: datetime | None = None
    updated_by: str | None = None


class TractorDetail(TractorRead):
    latest_history_date: datetime | None = None


class TractorSummary(TractorDetail):
    open_issues_count: int = 0
    comments_count: int = 0


class HistoryRead(CamelModel):
    id: str
    tractor_id: str
    field_name: str
    old_value: str | None = None
    new_value: str | None = None
    changed_at: datetime
    changed_by: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True
