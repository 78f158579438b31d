from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingLinkSchema(CamelModel):
    slug: str
    title: str
    description: str | None = None
    duration: int
    meeting_type: str


class HostSchema(CamelModel):
    name: str
    timezone: str


class DaySlotsSchema(CamelModel):
    date: str
    times: list[str]


class AvailabilityResponseSchema(CamelModel):
    booking_link: BookingLinkSchema
    host: HostSchema
    slots: list[DaySlotsSchema]


class BookRequestSchema(CamelModel):
    # Required fields are checked by the allocator so missing ones map to a 400
    date: str | None = None
    time: str | None = None
    name: str | None = None
    email: EmailStr | None = None
    company: str | None = None
    role: str | None = None
    notes: str | None = None
    phone: str | None = None
    meeting_type: str | None = None


class BookedSchema(CamelModel):
    id: str
    date: str
    time: str
    duration: int
    title: str
    host_name: str
    status: str
    meet_link: str | None = None
    calendar_event_id: str | None = None


class BookResponseSchema(CamelModel):
    success: bool = True
    booking: BookedSchema
    warning: str | None = None


class AvailabilityRuleSchema(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    is_active: bool = True
    timezone: str | None = None


class ReplaceAvailabilityRequestSchema(CamelModel):
    slots: list[AvailabilityRuleSchema]


class BookingLinkCreateSchema(CamelModel):
    slug: str | None = None
    title: str | None = None
    description: str | None = None
    duration: int | None = None
    meeting_type: str | None = None


class BookingLinkUpdateSchema(CamelModel):
    title: str | None = None
    description: str | None = None
    duration: int | None = None
    meeting_type: str | None = None
    is_active: bool | None = None


class BookingLinkDetailSchema(BookingLinkSchema):
    is_active: bool
