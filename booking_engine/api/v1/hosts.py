from __future__ import annotations

from fastapi import APIRouter, Depends

from booking_engine.api.v1.schemas import (
    AvailabilityRuleSchema,
    BookingLinkCreateSchema,
    BookingLinkDetailSchema,
    BookingLinkUpdateSchema,
    ReplaceAvailabilityRequestSchema,
)
from booking_engine.application.use_cases.manage_host_settings import HostSettingsUseCase, RuleInput
from booking_engine.domain.entities.availability_rule import AvailabilityRule
from booking_engine.domain.entities.booking_link import BookingLink
from booking_engine.wiring.dependencies import get_host_settings_use_case

router = APIRouter(prefix="/hosts/{host_id}")

_LINK_FIELD_NAMES = {"duration": "duration_minutes", "is_active": "active"}


@router.get("/availability", response_model=list[AvailabilityRuleSchema])
def list_availability_rules(
    host_id: str,
    uc: HostSettingsUseCase = Depends(get_host_settings_use_case),
):
    return [_rule_schema(rule) for rule in uc.list_rules(host_id)]


@router.put("/availability", response_model=list[AvailabilityRuleSchema])
def replace_availability_rules(
    host_id: str,
    req: ReplaceAvailabilityRequestSchema,
    uc: HostSettingsUseCase = Depends(get_host_settings_use_case),
):
    rules = uc.replace_rules(
        host_id,
        [
            RuleInput(
                day_of_week=item.day_of_week,
                start_time=item.start_time,
                end_time=item.end_time,
                active=item.is_active,
                timezone=item.timezone,
            )
            for item in req.slots
        ],
    )
    return [_rule_schema(rule) for rule in rules]


@router.get("/booking-links", response_model=list[BookingLinkDetailSchema])
def list_booking_links(
    host_id: str,
    uc: HostSettingsUseCase = Depends(get_host_settings_use_case),
):
    return [_link_schema(link) for link in uc.list_links(host_id)]


@router.post("/booking-links", response_model=BookingLinkDetailSchema, status_code=201)
def create_booking_link(
    host_id: str,
    req: BookingLinkCreateSchema,
    uc: HostSettingsUseCase = Depends(get_host_settings_use_case),
):
    link = uc.create_link(
        host_id,
        slug=req.slug,
        title=req.title,
        description=req.description,
        duration_minutes=req.duration,
        meeting_type=req.meeting_type,
    )
    return _link_schema(link)


@router.patch("/booking-links/{slug}", response_model=BookingLinkDetailSchema)
def update_booking_link(
    host_id: str,
    slug: str,
    req: BookingLinkUpdateSchema,
    uc: HostSettingsUseCase = Depends(get_host_settings_use_case),
):
    changes = {
        _LINK_FIELD_NAMES.get(key, key): value
        for key, value in req.model_dump(exclude_unset=True).items()
        if value is not None or key == "description"
    }
    return _link_schema(uc.update_link(host_id, slug, changes))


def _rule_schema(rule: AvailabilityRule) -> AvailabilityRuleSchema:
    return AvailabilityRuleSchema(
        day_of_week=rule.day_of_week,
        start_time=rule.start_time.strftime("%H:%M"),
        end_time=rule.end_time.strftime("%H:%M"),
        is_active=rule.active,
        timezone=rule.timezone,
    )


def _link_schema(link: BookingLink) -> BookingLinkDetailSchema:
    return BookingLinkDetailSchema(
        slug=link.slug,
        title=link.title,
        description=link.description,
        duration=link.duration_minutes,
        meeting_type=link.meeting_type.value,
        is_active=link.active,
    )
