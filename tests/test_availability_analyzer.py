from app.schemas.availability import ProposedTimeSlot
from app.schemas.event import DateRange, Slot
from app.schemas.member import Member
from app.services import event_aggregate
from app.services.availability_analyzer import (
    analyze,
    best_available_slots,
    format_time_slot,
    interesting_slots,
    top_available_slots,
)
from app.services.availability_store import AvailabilityStore
from tests.conftest import DIRECTOR_ID, EVENT_DATE, MEMBER_ID

MEMBERS = [Member(id="a", name="A"), Member(id="b", name="B"), Member(id="c", name="C")]


def make_slot(time, users, date=EVENT_DATE):
    return Slot(date=date, time=time, availableUsers=users)


def test_ranks_all_available_then_by_count():
    slots = [
        make_slot("09:00 AM", ["a"]),
        make_slot("09:30 AM", ["a", "b", "c"]),
        make_slot("10:00 AM", []),
        make_slot("10:30 AM", ["a", "b"]),
    ]
    proposed = analyze(slots, MEMBERS)

    assert [p.time for p in proposed] == ["09:30 AM", "10:30 AM", "09:00 AM", "10:00 AM"]
    assert proposed[0].isAllAvailable
    assert proposed[0].availableCount == 3
    assert all(p.totalMembers == 3 for p in proposed)


def test_output_is_lexicographically_non_increasing():
    slots = [make_slot(t, users) for t, users in [
        ("09:00 AM", ["a", "b"]),
        ("09:30 AM", []),
        ("10:00 AM", ["a", "b", "c"]),
        ("10:30 AM", ["c"]),
        ("11:00 AM", ["a", "b", "c"]),
    ]]
    keys = [(p.isAllAvailable, p.availableCount) for p in analyze(slots, MEMBERS)]
    assert all(keys[i] >= keys[i + 1] for i in range(len(keys) - 1))


def test_ties_keep_slot_order():
    slots = [make_slot("10:00 AM", ["a"]), make_slot("09:00 AM", ["b"])]
    assert [p.time for p in analyze(slots, MEMBERS)] == ["10:00 AM", "09:00 AM"]


def test_zero_availability_slots_are_kept():
    slots = [make_slot("09:00 AM", []), make_slot("09:30 AM", [])]
    proposed = analyze(slots, MEMBERS)
    assert len(proposed) == 2
    assert not any(p.isAllAvailable for p in proposed)


def test_no_members_never_all_available():
    proposed = analyze([make_slot("09:00 AM", [])], [])
    assert proposed[0].totalMembers == 0
    assert proposed[0].isAllAvailable is False


def test_date_range_limits_candidates():
    slots = [
        make_slot("09:00 AM", ["a"], date="2024-05-01"),
        make_slot("09:00 AM", ["a"], date="2024-05-09"),
    ]
    proposed = analyze(slots, MEMBERS, DateRange(startDate="2024-05-01", endDate="2024-05-03"))
    assert [p.date for p in proposed] == ["2024-05-01"]


def test_analyze_is_pure():
    slots = [make_slot("09:00 AM", ["a", "b"]), make_slot("09:30 AM", ["c"])]
    snapshot = [slot.model_copy(deep=True) for slot in slots]
    assert analyze(slots, MEMBERS) == analyze(slots, MEMBERS)
    assert slots == snapshot


def test_removing_member_reduces_total(aggregate):
    store = AvailabilityStore(aggregate)
    store.toggle(EVENT_DATE, "09:00 AM", MEMBER_ID, True)
    store.toggle(EVENT_DATE, "09:00 AM", DIRECTOR_ID, True)
    assert analyze(aggregate.slots, aggregate.members)[0].totalMembers == 2

    event_aggregate.remove_member(aggregate, MEMBER_ID)
    proposed = analyze(aggregate.slots, aggregate.members)

    assert all(p.totalMembers == 1 for p in proposed)
    assert proposed[0].time == "09:00 AM"
    assert proposed[0].isAllAvailable


def proposal(time, count, total=4):
    return ProposedTimeSlot(
        date=EVENT_DATE,
        time=time,
        availableCount=count,
        totalMembers=total,
        isAllAvailable=count == total,
    )


def test_presentation_filters():
    proposed = [proposal("09:00 AM", 4), proposal("09:30 AM", 3), proposal("10:00 AM", 1),
                proposal("10:30 AM", 0)]

    assert [p.time for p in best_available_slots(proposed)] == ["09:00 AM"]
    assert [p.time for p in top_available_slots(proposed)] == ["09:00 AM"]
    assert [p.time for p in top_available_slots(proposed, 0.75)] == ["09:00 AM", "09:30 AM"]
    assert [p.time for p in interesting_slots(proposed)] == ["09:00 AM", "09:30 AM", "10:00 AM"]
    assert [p.time for p in interesting_slots(proposed, limit=2)] == ["09:00 AM", "09:30 AM"]
    assert top_available_slots([proposal("09:00 AM", 0, total=0)]) == []


def test_format_time_slot():
    assert format_time_slot(proposal("10:00 AM", 1)) == "May 1 at 10:00 AM"
