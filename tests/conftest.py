import copy

import pytest

from chillpoints.services.api_client import UserSession
from chillpoints.services.chill_points_service import (
    EXPIRING_KEY,
    POINTS_KEY,
    TRANSACTIONS_KEY,
    ChillPointsStore,
)
from chillpoints.services.notifications import Notifier
from chillpoints.services.query_cache import QueryCache


def make_tier(name="gold", threshold=1000, benefits=None):
    return {
        "name": name,
        "threshold": threshold,
        "benefits": benefits if benefits is not None else [f"{name} benefit 1", f"{name} benefit 2"],
    }


def make_points(points=1200, tier="gold", next_tier="platinum", progress=40.0):
    return {
        "points": points,
        "tier": make_tier(tier),
        "nextTier": make_tier(next_tier, threshold=5000) if next_tier else None,
        "progress": progress,
        "statistics": {"totalEarned": 2000, "totalRedeemed": 800, "transactionsCount": 7},
    }


def make_transaction(id, points=100, transaction_type="earn", description="Booking reward", **extra):
    tx = {
        "id": id,
        "userId": 1,
        "points": points,
        "description": description,
        "transactionType": transaction_type,
        "status": "active",
        "createdAt": "2026-10-01T12:00:00Z",
    }
    tx.update(extra)
    return tx


def make_expiring(total=0, nearest=None, transactions=()):
    return {
        "expiringTransactions": list(transactions),
        "totalExpiring": total,
        "nearestExpiry": nearest,
    }


class FakeRewardsClient:
    """Stands in for RewardsApiClient; answers GETs from a path table."""

    def __init__(self, responses=None):
        self.responses = responses if responses is not None else {}
        self.post_results = {}
        self.gets = []
        self.posts = []
        self.closed = False

    def get_json(self, path):
        self.gets.append(path)
        value = self.responses.get(path)
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)

    def post_json(self, path, payload):
        self.posts.append((path, payload))
        value = self.post_results.get(path, {"success": True})
        if isinstance(value, Exception):
            raise value
        return value

    def get_count(self, path):
        return self.gets.count(path)

    def close(self):
        self.closed = True


@pytest.fixture
def rewards_responses():
    return {
        POINTS_KEY: make_points(),
        TRANSACTIONS_KEY: [
            make_transaction(1, 100, "earn", "Stay at Marina Villa"),
            make_transaction(2, 50, "redeem", "Discount on next booking"),
        ],
        EXPIRING_KEY: make_expiring(total=150, nearest="2026-10-20T12:00:00Z"),
    }


@pytest.fixture
def fake_client(rewards_responses):
    return FakeRewardsClient(rewards_responses)


@pytest.fixture
def session():
    return UserSession(token="token-123", email="guest@example.com", user_id=1)


@pytest.fixture
def store(fake_client, session):
    return ChillPointsStore(fake_client, QueryCache(), Notifier(), session=session)
