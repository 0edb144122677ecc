import boto3
import pytest

from app.database.event_store import InMemoryEventStore
from app.schemas.event import DateRange, EventCreate, TimeRange
from app.schemas.member import Member, Role
from app.services import event_aggregate
from app.services.event_service import EventService

TEST_TABLE_NAME = "SyncUpEvents_Test"

EVENT_DATE = "2024-05-01"
DIRECTOR_ID = "director-1"
MEMBER_ID = "member-1"


@pytest.fixture
def store():
    """Fresh in-memory event store for each test"""
    return InMemoryEventStore()


@pytest.fixture
def event_service(store):
    return EventService(store)


@pytest.fixture
def valid_event_data():
    """One day, two half-hour slots, created by a Director"""
    return EventCreate(
        title="Spring Showcase",
        description="Pick a rehearsal slot",
        creatorName="Dana",
        creatorRole=Role.DIRECTOR,
        creatorId=DIRECTOR_ID,
        dateRange=DateRange(startDate=EVENT_DATE, endDate=EVENT_DATE),
        timeRange=TimeRange(startTime="09:00 AM", endTime="09:30 AM"),
    )


@pytest.fixture
def aggregate(valid_event_data):
    """In-memory event with the creator and one plain member"""
    event = event_aggregate.new_event(valid_event_data, event_id="event-1")
    event_aggregate.add_member(event, Member(id=MEMBER_ID, name="Lee"))
    return event


@pytest.fixture
def saved_event(store, aggregate):
    store.save(aggregate)
    return aggregate


@pytest.fixture
def dynamodb_resource():
    """DynamoDB resource that never leaves the process once stubbed"""
    return boto3.resource(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="fake",
        aws_secret_access_key="fake",
    )
