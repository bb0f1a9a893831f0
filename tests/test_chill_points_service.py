import threading

from chillpoints.services.api_client import ApiError
from chillpoints.services.chill_points_service import (
    EXPIRING_KEY,
    POINTS_KEY,
    REDEEM_PATH,
    TRANSACTIONS_KEY,
    TRANSFER_PATH,
    ChillPointsStore,
)
from chillpoints.services.notifications import Notifier
from chillpoints.services.query_cache import QueryCache

from conftest import FakeRewardsClient, make_points


def test_signed_out_store_makes_no_calls(fake_client):
    store = ChillPointsStore(fake_client, QueryCache(), Notifier())

    snap = store.snapshot()

    assert snap.rewards is None
    assert snap.transactions == ()
    assert snap.expiring_points is None
    assert snap.error is None
    assert fake_client.gets == []


def test_snapshot_loads_all_three_queries(store, fake_client):
    snap = store.snapshot()

    assert snap.rewards.points == 1200
    assert [tx.id for tx in snap.transactions] == [1, 2]
    assert snap.expiring_points.total_expiring == 150
    assert not snap.points_loading
    assert sorted(fake_client.gets) == sorted([POINTS_KEY, TRANSACTIONS_KEY, EXPIRING_KEY])


def test_snapshot_is_cached_between_reads(store, fake_client):
    store.snapshot()
    store.snapshot()

    assert fake_client.get_count(POINTS_KEY) == 1


def test_redeem_success_invalidates_points_and_transactions_once(store, fake_client):
    store.snapshot()

    result = store.redeem(500, "test")

    assert result.ok
    assert fake_client.posts == [(REDEEM_PATH, {"points": 500, "description": "test"})]
    assert fake_client.get_count(POINTS_KEY) == 2
    assert fake_client.get_count(TRANSACTIONS_KEY) == 2
    assert fake_client.get_count(EXPIRING_KEY) == 1

    toasts = store.notifier.drain()
    assert len(toasts) == 1
    assert toasts[0].variant == "default"


def test_redeem_success_shows_refetched_balance(store, fake_client):
    store.snapshot()
    fake_client.responses[POINTS_KEY] = make_points(points=700)

    store.redeem(500, "test")

    assert store.snapshot().rewards.points == 700


def test_redeem_failure_leaves_state_and_emits_one_error(store, fake_client):
    before = store.snapshot().rewards.points
    fake_client.post_results[REDEEM_PATH] = ApiError("Not enough points", status_code=400)

    result = store.redeem(500, "test")

    assert not result.ok
    assert result.error == "Not enough points"
    assert store.snapshot().rewards.points == before
    assert fake_client.get_count(POINTS_KEY) == 1

    toasts = store.notifier.drain()
    assert len(toasts) == 1
    assert toasts[0].variant == "destructive"
    assert toasts[0].description == "Not enough points"


def test_redeem_failure_without_message_uses_generic_text(store, fake_client):
    fake_client.post_results[REDEEM_PATH] = ApiError("")

    result = store.redeem(100, "x")

    assert result.error == "Something went wrong while redeeming your points."


def test_redeem_rejects_non_positive_points_without_calling_server(store, fake_client):
    result = store.redeem(0, "nothing")

    assert not result.ok
    assert fake_client.posts == []
    assert store.notifier.drain()[0].variant == "destructive"


def test_transfer_posts_recipient_and_default_description(store, fake_client):
    store.snapshot()

    result = store.transfer(200, "friend@example.com", "")

    assert result.ok
    assert fake_client.posts == [
        (
            TRANSFER_PATH,
            {"points": 200, "recipientEmail": "friend@example.com", "description": "Points transfer to friend@example.com"},
        )
    ]
    assert fake_client.get_count(POINTS_KEY) == 2
    assert fake_client.get_count(TRANSACTIONS_KEY) == 2


def test_transfer_failure_toast_carries_server_message(store, fake_client):
    fake_client.post_results[TRANSFER_PATH] = ApiError("Recipient not found", status_code=404)

    result = store.transfer(200, "nobody@example.com", "gift")

    assert not result.ok
    toasts = store.notifier.drain()
    assert toasts[0].title == "Transfer failed"
    assert toasts[0].description == "Recipient not found"


def test_points_error_is_exposed_on_snapshot(fake_client, session):
    fake_client.responses[POINTS_KEY] = ApiError("500: boom", status_code=500)
    store = ChillPointsStore(fake_client, QueryCache(), Notifier(), session=session)

    snap = store.snapshot()

    assert snap.rewards is None
    assert isinstance(snap.error, ApiError)
    # other queries fail independently
    assert len(snap.transactions) == 2


def test_invalid_server_payload_is_a_failed_query(fake_client, session):
    fake_client.responses[POINTS_KEY] = make_points(progress=250)
    store = ChillPointsStore(fake_client, QueryCache(), Notifier(), session=session)

    snap = store.snapshot()

    assert snap.rewards is None
    assert snap.error is not None


def test_refresh_points_forces_refetch(store, fake_client):
    store.snapshot()
    store.refresh_points()
    store.refresh_transactions()

    assert fake_client.get_count(POINTS_KEY) == 2
    assert fake_client.get_count(TRANSACTIONS_KEY) == 2


def test_sign_out_discards_cached_state(store, fake_client):
    store.snapshot()
    store.sign_out()

    snap = store.snapshot()

    assert snap.rewards is None
    assert store.cache.keys() == []
    assert fake_client.get_count(POINTS_KEY) == 1


class GatedPointsClient(FakeRewardsClient):
    """Blocks points reads once armed, until released."""

    def __init__(self, responses):
        super().__init__(responses)
        self.armed = False
        self.started = threading.Event()
        self.release = threading.Event()

    def get_json(self, path):
        if path == POINTS_KEY and self.armed:
            self.started.set()
            self.release.wait(5)
        return super().get_json(path)


def test_snapshot_reports_points_loading_during_slow_refresh(rewards_responses, session):
    client = GatedPointsClient(rewards_responses)
    store = ChillPointsStore(client, QueryCache(), Notifier(), session=session)
    before = store.snapshot()
    assert before.points_loading is False

    client.responses[POINTS_KEY] = make_points(points=900)
    client.armed = True
    worker = threading.Thread(target=store.refresh_points)
    worker.start()
    try:
        assert client.started.wait(5)

        during = store.snapshot()

        assert during.points_loading is True
        assert during.rewards.points == before.rewards.points
        assert during.transactions_loading is False
    finally:
        client.release.set()
        worker.join(5)

    after = store.snapshot()
    assert after.points_loading is False
    assert after.rewards.points == 900
    assert client.get_count(POINTS_KEY) == 2
