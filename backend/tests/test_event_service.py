"""
Tests for event reconciliation.

Tests: EventReconciler.query_events ordering, pagination, unknown topic
recovery, argument validation, payload normalization
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import asyncio
import logging

import pytest

from domain.enums import EventKind
from domain.errors import InvalidArgumentError, QueryFailedError, SchemaMismatchError
from exceptions import RpcErrorCause
from models import AdminFeeWithdrawnData, PaymentCompletedData
from services.event_service import EventReconciler
from tests.conftest import PACKAGE_ID

PAYMENT_TYPE = f"{PACKAGE_ID}::payment_processor::PaymentCompleted"
FEE_TYPE = f"{PACKAGE_ID}::payment_processor::AdminFeeWithdrawn"


@pytest.fixture
def reconciler(fake_client):
    return EventReconciler(fake_client, PACKAGE_ID)


class TestEventType:

    @pytest.mark.unit
    def test_fully_qualified(self, reconciler):
        assert reconciler.event_type(EventKind.ADMIN_FEE_WITHDRAWN) == FEE_TYPE


class TestPaymentEvents:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fixture_events_reconcile(self, fake_client, reconciler, payment_event):
        fake_client.events[PAYMENT_TYPE] = [
            payment_event(3, 3_000, total=60, fee=10),
            payment_event(2, 2_000, total=110, fee=10),
            payment_event(1, 1_000, total=10, fee=10),
        ]

        events = await reconciler.payment_events()

        assert len(events) == 3
        for ev in events:
            assert isinstance(ev.data, PaymentCompletedData)
            assert ev.data.total_amount == ev.data.merchant_received + ev.data.admin_fee

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_newest_first_and_normalized(self, fake_client, reconciler, payment_event):
        fake_client.events[PAYMENT_TYPE] = [payment_event(1, 1_000), payment_event(2, 5_000)]

        events = await reconciler.payment_events(10)

        assert [ev.timestamp_ms for ev in events] == [5_000, 1_000]
        newest = events[0]
        assert newest.transaction_digest == "Tx2"
        assert newest.id.event_seq == "2"
        assert newest.data.merchant_id == "shop"
        assert newest.data.product_id == "widget"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_topic_is_empty(self, fake_client, reconciler):
        assert await reconciler.payment_events() == []
        assert fake_client.calls["suix_queryEvents"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1])
    async def test_non_positive_limit_makes_no_call(self, fake_client, reconciler, limit):
        with pytest.raises(InvalidArgumentError):
            await reconciler.payment_events(limit)
        assert fake_client.total_calls == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_paginates_with_capped_page_size(self, fake_client, reconciler, payment_event):
        fake_client.events[PAYMENT_TYPE] = [payment_event(i, 200_000 - i) for i in range(130)]

        events = await reconciler.payment_events(120)

        assert len(events) == 120
        limits = [params["limit"] for method, params in fake_client.call_log]
        assert limits == [50, 50, 20]
        assert events[0].id.event_seq == "0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stops_when_topic_exhausted(self, fake_client, reconciler, payment_event):
        fake_client.events[PAYMENT_TYPE] = [payment_event(1, 1_000)]

        events = await reconciler.payment_events(100)

        assert len(events) == 1
        assert fake_client.calls["suix_queryEvents"] == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_other_failures_surface(self, fake_client, reconciler):
        fake_client.fail("suix_queryEvents", RpcErrorCause.NETWORK, "timeout")
        with pytest.raises(QueryFailedError):
            await reconciler.payment_events()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_payload(self, fake_client, reconciler, payment_event):
        broken = payment_event(1, 1_000)
        del broken["parsedJson"]["admin_fee"]
        fake_client.events[PAYMENT_TYPE] = [broken]

        with pytest.raises(SchemaMismatchError):
            await reconciler.payment_events()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_reconciling_event_logged(self, fake_client, reconciler, payment_event, caplog):
        bad = payment_event(1, 1_000)
        bad["parsedJson"]["merchant_received"] = "1"
        fake_client.events[PAYMENT_TYPE] = [bad]

        with caplog.at_level(logging.WARNING, logger="services.event_service"):
            events = await reconciler.payment_events()

        assert len(events) == 1
        assert "does not reconcile" in caplog.text


class TestAdminFeeEvents:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_withdrawals(self, fake_client, reconciler):
        fake_client.events[FEE_TYPE] = [{
            "id": {"txDigest": "W1", "eventSeq": 0},
            "parsedJson": {"amount_withdrawn": "30", "admin": "0xad"},
            "timestampMs": "7000",
        }]

        events = await reconciler.admin_fee_events()

        assert len(events) == 1
        assert isinstance(events[0].data, AdminFeeWithdrawnData)
        assert events[0].data.amount_withdrawn == 30
        assert events[0].id.event_seq == "0"


class StalledEventClient:
    """Node that keeps claiming more pages without advancing."""

    def __init__(self, page):
        self.page = page
        self.calls = 0

    async def query_events(self, event_type, cursor=None, limit=None, descending=True):
        self.calls += 1
        return self.page


class TestStalledPagination:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_page_with_more_flag_stops(self):
        client = StalledEventClient({"data": [], "hasNextPage": True, "nextCursor": {"txDigest": "X", "eventSeq": "0"}})

        events = await asyncio.wait_for(EventReconciler(client, PACKAGE_ID).payment_events(5), 1)

        assert events == []
        assert client.calls == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_repeated_cursor_stops(self, payment_event):
        raw = payment_event(1, 1_000)
        client = StalledEventClient({"data": [raw], "hasNextPage": True, "nextCursor": raw["id"]})

        events = await asyncio.wait_for(EventReconciler(client, PACKAGE_ID).payment_events(5), 1)

        assert client.calls == 2
        assert len(events) == 2
