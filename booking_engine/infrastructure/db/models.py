from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class HostRow(Base):
    __tablename__ = "hosts"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    google_access_token = Column(String, nullable=True)
    google_refresh_token = Column(String, nullable=True)
    token_expires_at = Column(DateTime, nullable=True)  # naive UTC


class AvailabilityRuleRow(Base):
    __tablename__ = "availability_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(String, ForeignKey("hosts.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)
    timezone = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class BookingLinkRow(Base):
    __tablename__ = "booking_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(String, ForeignKey("hosts.id"), nullable=False, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    title = Column(String, nullable=False, default="Quick Chat")
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=30)
    meeting_type = Column(String, nullable=False, default="GOOGLE_MEET")
    is_active = Column(Boolean, nullable=False, default=True)


class BookingRow(Base):
    __tablename__ = "bookings"

    id = Column(String, primary_key=True)
    host_id = Column(String, ForeignKey("hosts.id"), nullable=False, index=True)
    link_slug = Column(String, nullable=False)
    start_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    end_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    guest_name = Column(String, nullable=False)
    guest_email = Column(String, nullable=False)
    guest_company = Column(String, nullable=True)
    guest_role = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(String, nullable=False, default="CONFIRMED")  # CONFIRMED / CALENDAR_FAILED
    external_event_id = Column(String, nullable=True)
    meet_link = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        # Two bookers racing for the same start: the second insert is rejected
        UniqueConstraint("host_id", "start_at", name="uq_booking_host_start"),
    )
