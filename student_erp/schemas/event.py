from datetime import date, datetime

from pydantic import BaseModel, Field


class EventCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    event_date: date
    event_time: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    banner: str | None = None
    registration_link: str | None = None
    resources: list[str] = []
    batch_ids: list[int] = []


class EventUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1)
    description: str | None = Field(None, min_length=1)
    event_date: date | None = None
    event_time: str | None = Field(None, min_length=1)
    venue: str | None = Field(None, min_length=1)
    banner: str | None = None
    registration_link: str | None = None
    resources: list[str] | None = None
    batch_ids: list[int] | None = None


class EventResponse(BaseModel):
    id: int
    name: str
    description: str
    event_date: date
    event_time: str
    venue: str
    banner: str | None = None
    registration_link: str | None = None
    resources: list[str] = []
    batch_ids: list[int] = []
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
