import pytest

from app import config
from app.schemas.event import DateRange, EventCreate, TimeRange
from app.schemas.member import Member, MemberSeed, Role
from app.services import event_aggregate
from app.services.availability_store import AvailabilityStore
from app.services.errors import (
    CreatorProtectedError,
    MemberNotFoundError,
    PermissionDeniedError,
    SlotNotFoundError,
)
from tests.conftest import DIRECTOR_ID, EVENT_DATE, MEMBER_ID


def test_new_event_prepopulates_empty_grid():
    data = EventCreate(
        title="Tour",
        creatorName="Dana",
        dateRange=DateRange(startDate="2024-05-01", endDate="2024-05-03"),
        timeRange=TimeRange(startTime="05:00 PM", endTime="07:00 PM"),
    )
    event = event_aggregate.new_event(data)

    assert len(event.slots) == 3 * 5
    assert (event.slots[0].date, event.slots[0].time) == ("2024-05-01", "05:00 PM")
    assert (event.slots[-1].date, event.slots[-1].time) == ("2024-05-03", "07:00 PM")
    assert all(slot.availableUsers == [] for slot in event.slots)
    assert len({(s.date, s.time) for s in event.slots}) == len(event.slots)

    assert event.members[0].id == event.creatorId
    assert event.members[0].role == Role.DIRECTOR
    assert event.messages[0].isSystem
    assert event.messages[0].text == "Dana created the event (2024-05-01 to 2024-05-03)"
    assert not event.isLocked
    assert event.lockedSlot is None


def test_lock_and_unlock_round_trip(aggregate):
    event_aggregate.lock_slot(aggregate, EVENT_DATE, "09:30 AM")
    assert aggregate.isLocked
    assert (aggregate.lockedSlot.date, aggregate.lockedSlot.time) == (EVENT_DATE, "09:30 AM")
    assert aggregate.messages[-1].text == f"Event locked for {EVENT_DATE} at 09:30 AM"

    event_aggregate.unlock(aggregate, "Dana")
    assert not aggregate.isLocked
    assert aggregate.lockedSlot is None
    assert aggregate.messages[-1].text == "Event unlocked by Dana"


def test_lock_empty_slot_and_relock(aggregate):
    event_aggregate.lock_slot(aggregate, EVENT_DATE, "09:00 AM")
    event_aggregate.lock_slot(aggregate, EVENT_DATE, "09:30 AM")
    assert aggregate.isLocked
    assert aggregate.lockedSlot.time == "09:30 AM"


def test_lock_outside_the_grid_is_rejected(aggregate):
    with pytest.raises(SlotNotFoundError):
        event_aggregate.lock_slot(aggregate, "2024-06-01", "09:00 AM")
    with pytest.raises(SlotNotFoundError):
        event_aggregate.lock_slot(aggregate, EVENT_DATE, "11:00 PM")

    assert not aggregate.isLocked
    assert aggregate.lockedSlot is None
    assert aggregate.messages[-1].text == "Lee joined the event"


def test_message_log_keeps_newest_entries(aggregate, monkeypatch):
    monkeypatch.setattr(config, "MAX_MESSAGES", 3)
    author = event_aggregate.find_member(aggregate, MEMBER_ID)
    for n in range(5):
        event_aggregate.append_message(aggregate, author, f"note {n}")

    assert [m.text for m in aggregate.messages] == ["note 2", "note 3", "note 4"]

    event_aggregate.lock_slot(aggregate, EVENT_DATE, "09:00 AM")
    assert len(aggregate.messages) == 3
    assert aggregate.messages[-1].isSystem


def test_add_member_is_idempotent_by_id(aggregate):
    again = event_aggregate.add_member(aggregate, Member(id=MEMBER_ID, name="Someone else"))
    assert again.name == "Lee"
    assert [m.id for m in aggregate.members] == [DIRECTOR_ID, MEMBER_ID]
    assert aggregate.messages[-1].text == "Lee joined the event"


def test_member_seed_becomes_plain_member():
    seed = MemberSeed(userId="g-123", displayName="Robin", email="robin@example.com")
    member = seed.to_member()
    assert (member.id, member.name, member.role) == ("g-123", "Robin", Role.MEMBER)
    assert member.email == "robin@example.com"


def test_creator_cannot_be_removed(aggregate):
    with pytest.raises(CreatorProtectedError):
        event_aggregate.remove_member(aggregate, DIRECTOR_ID)
    assert len(aggregate.members) == 2


def test_remove_member_purges_availability(aggregate):
    AvailabilityStore(aggregate).toggle(EVENT_DATE, "09:00 AM", MEMBER_ID, True)
    removed = event_aggregate.remove_member(aggregate, MEMBER_ID)

    assert removed.id == MEMBER_ID
    assert [m.id for m in aggregate.members] == [DIRECTOR_ID]
    assert all(MEMBER_ID not in slot.availableUsers for slot in aggregate.slots)


def test_remove_unknown_member(aggregate):
    with pytest.raises(MemberNotFoundError):
        event_aggregate.remove_member(aggregate, "ghost")


def test_creator_role_can_still_be_changed(aggregate):
    updated = event_aggregate.update_member_role(aggregate, DIRECTOR_ID, Role.MEMBER)
    assert updated.role == Role.MEMBER
    assert event_aggregate.find_member(aggregate, DIRECTOR_ID).role == Role.MEMBER


def test_role_permissions():
    assert Role.DIRECTOR.can_lock_slot and Role.DIRECTOR.can_edit_logistics
    assert Role.CO_MANAGER.can_lock_slot and Role.CO_MANAGER.can_manage_members
    assert not Role.MEMBER.can_lock_slot
    assert not Role.MEMBER.can_edit_logistics
    assert not Role.MEMBER.can_propose_slot


def test_authorize(aggregate):
    assert event_aggregate.authorize(aggregate, DIRECTOR_ID, "can_lock_slot", "lock").id == (
        DIRECTOR_ID
    )
    with pytest.raises(PermissionDeniedError):
        event_aggregate.authorize(aggregate, MEMBER_ID, "can_lock_slot", "lock")


def test_update_logistics_merges_given_fields(aggregate):
    event_aggregate.update_logistics(aggregate, {"venue": "Studio B", "notes": None}, "Dana")
    event_aggregate.update_logistics(aggregate, {"wardrobe": "Black", "bogus": "x"}, "Kim")

    logistics = aggregate.logistics
    assert logistics.venue == "Studio B"
    assert logistics.wardrobe == "Black"
    assert logistics.notes == ""
    assert logistics.lastUpdatedBy == "Kim"


def test_append_message(aggregate):
    lee = event_aggregate.find_member(aggregate, MEMBER_ID)
    message = event_aggregate.append_message(aggregate, lee, "Works for me")
    assert aggregate.messages[-1] == message
    assert (message.userId, message.userName, message.isSystem) == (MEMBER_ID, "Lee", False)


def test_propose_slot_records_and_posts(aggregate):
    AvailabilityStore(aggregate).toggle(EVENT_DATE, "09:30 AM", MEMBER_ID, True)
    director = event_aggregate.find_member(aggregate, DIRECTOR_ID)

    proposed = event_aggregate.propose_slot(aggregate, director, EVENT_DATE, "09:30 AM")

    assert aggregate.approvedTimeSlot == proposed
    assert (proposed.availableCount, proposed.totalMembers) == (1, 2)
    assert aggregate.messages[-1].text.startswith("📅 Proposed Time: May 1 at 09:30 AM")
    assert aggregate.messages[-1].userId == DIRECTOR_ID


def test_invite_details(aggregate):
    invite = event_aggregate.invite_details(aggregate)
    assert invite.id == aggregate.id
    assert invite.creatorId == DIRECTOR_ID
    assert invite.dateRange == aggregate.dateRange
    assert invite.timeRange.startTime == "09:00 AM"
