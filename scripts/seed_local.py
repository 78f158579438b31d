#!/usr/bin/env python3
"""
Seed a demo host for local runs.

Usage:
  python3 scripts/seed_local.py [host_id] [slug]

Creates the host, a Monday-Friday 09:00-17:00 availability, and a 30 minute
booking link, then prints the URLs to try against `uvicorn booking_engine.main:app`.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from booking_engine.application.exceptions import SlugTakenError
from booking_engine.application.use_cases.manage_host_settings import RuleInput
from booking_engine.domain.entities.host import HostAccount
from booking_engine.wiring.dependencies import get_database, get_host_settings_use_case, get_host_store


def main() -> None:
    host_id = sys.argv[1] if len(sys.argv) > 1 else "demo-host"
    slug = sys.argv[2] if len(sys.argv) > 2 else "intro-call"

    get_database().create_all()
    get_host_store().upsert_host(HostAccount(id=host_id, name="Demo Host", email="host@example.com"))

    uc = get_host_settings_use_case()
    uc.replace_rules(
        host_id,
        [RuleInput(day_of_week=day, start_time="09:00", end_time="17:00") for day in range(1, 6)],
    )
    try:
        uc.create_link(host_id, slug=slug, title="Intro Call", duration_minutes=30)
    except SlugTakenError:
        print(f"Booking link '{slug}' already exists, keeping it")

    print(f"Seeded host '{host_id}'")
    print(f"  GET  /availability?slug={slug}")
    print(f"  POST /book?slug={slug}  {{date, time, name, email}}")


if __name__ == "__main__":
    main()
