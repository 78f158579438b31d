from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import JSONResponse

from booking_engine.api.v1.schemas import (
    AvailabilityResponseSchema,
    BookedSchema,
    BookingLinkSchema,
    BookRequestSchema,
    BookResponseSchema,
    DaySlotsSchema,
    HostSchema,
)
from booking_engine.application.exceptions import BookingEngineError
from booking_engine.application.use_cases.book_slot import BookingAllocator, BookingCommand
from booking_engine.application.use_cases.list_availability import ListAvailabilityUseCase
from booking_engine.core.config import settings
from booking_engine.wiring.dependencies import get_booking_allocator, get_list_availability_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/availability", response_model=AvailabilityResponseSchema)
def get_availability(
    slug: str = Query(...),
    days: int = Query(settings.DEFAULT_HORIZON_DAYS),
    uc: ListAvailabilityUseCase = Depends(get_list_availability_use_case),
):
    try:
        listing = uc.execute(slug=slug, days=days)
    except BookingEngineError:
        raise
    except Exception as e:
        logger.exception("Error fetching booking availability", extra={"slug": slug, "error": str(e)})
        return JSONResponse(status_code=500, content={"error": "Failed to fetch availability"})

    link = listing.link
    return AvailabilityResponseSchema(
        booking_link=BookingLinkSchema(
            slug=link.slug,
            title=link.title,
            description=link.description,
            duration=link.duration_minutes,
            meeting_type=link.meeting_type.value,
        ),
        host=HostSchema(name=listing.host.display_name, timezone=listing.timezone),
        slots=[
            DaySlotsSchema(date=day.isoformat(), times=[c.time_label for c in candidates])
            for day, candidates in listing.slots.items()
        ],
    )


@router.post("/book", response_model=BookResponseSchema, response_model_exclude_none=True)
def book(
    req: BookRequestSchema,
    background_tasks: BackgroundTasks,
    slug: str = Query(...),
    allocator: BookingAllocator = Depends(get_booking_allocator),
):
    command = BookingCommand(
        slug=slug,
        date=req.date,
        time=req.time,
        name=req.name,
        email=str(req.email) if req.email else None,
        company=req.company,
        role=req.role,
        notes=req.notes,
        phone=req.phone,
        meeting_type=req.meeting_type,
    )
    try:
        outcome = allocator.book(command, defer=background_tasks.add_task)
    except BookingEngineError:
        raise
    except Exception as e:
        logger.exception("Error creating booking", extra={"slug": slug, "error": str(e)})
        return JSONResponse(status_code=500, content={"error": "Failed to create booking"})

    booking = outcome.booking
    return BookResponseSchema(
        booking=BookedSchema(
            id=booking.id,
            date=outcome.local_date.isoformat(),
            time=outcome.local_time,
            duration=booking.duration_minutes,
            title=outcome.link.title,
            host_name=outcome.host.display_name,
            status=outcome.stage.value,
            meet_link=booking.meet_link,
            calendar_event_id=booking.external_event_id,
        ),
        warning=outcome.warning,
    )
