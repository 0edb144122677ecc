"""Ranking of candidate meeting times from the group's availability."""

from datetime import date as date_type
from typing import List, Optional, Sequence

from app.schemas.availability import ProposedTimeSlot
from app.schemas.event import DateRange, Slot
from app.schemas.member import Member


def analyze(
    slots: Sequence[Slot],
    members: Sequence[Member],
    date_range: Optional[DateRange] = None,
) -> List[ProposedTimeSlot]:
    """Score every slot and rank all-available slots first, then by count.

    Zero-availability slots are kept; trimming the list for display is left
    to the caller (see interesting_slots). Equal keys keep slot order.
    """
    total_members = len(members)
    proposed = []
    for slot in slots:
        if date_range and not (
            date_range.startDate <= slot.date <= date_range.endDate
        ):
            continue
        available_count = len(set(slot.availableUsers))
        proposed.append(
            ProposedTimeSlot(
                date=slot.date,
                time=slot.time,
                availableCount=available_count,
                totalMembers=total_members,
                isAllAvailable=available_count == total_members and total_members > 0,
            )
        )

    proposed.sort(key=lambda p: (p.isAllAvailable, p.availableCount), reverse=True)
    return proposed


def best_available_slots(proposed: Sequence[ProposedTimeSlot]) -> List[ProposedTimeSlot]:
    return [p for p in proposed if p.isAllAvailable]


def top_available_slots(
    proposed: Sequence[ProposedTimeSlot], min_percentage: float = 0.8
) -> List[ProposedTimeSlot]:
    """Slots where at least min_percentage of the members are available"""
    return [
        p
        for p in proposed
        if p.totalMembers > 0 and p.availableCount / p.totalMembers >= min_percentage
    ]


def interesting_slots(
    proposed: Sequence[ProposedTimeSlot], limit: int = 5
) -> List[ProposedTimeSlot]:
    return [p for p in proposed if p.availableCount > 0][:limit]


def format_date_short(iso_date: str) -> str:
    parsed = date_type.fromisoformat(iso_date)
    return f"{parsed.strftime('%b')} {parsed.day}"


def format_time_slot(slot: ProposedTimeSlot) -> str:
    return f"{format_date_short(slot.date)} at {slot.time}"
