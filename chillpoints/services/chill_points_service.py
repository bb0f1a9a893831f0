from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from chillpoints.schemas.expiring_points import ExpiringPoints
from chillpoints.schemas.reward_request import RedeemRequest, TransferRequest
from chillpoints.schemas.reward_transaction import RewardTransaction
from chillpoints.schemas.rewards_points import RewardsPointsState
from chillpoints.services.api_client import ApiError, RewardsApiClient, UserSession
from chillpoints.services.i18n import Translator
from chillpoints.services.notifications import Notifier
from chillpoints.services.query_cache import QueryCache, QueryState


logger = logging.getLogger(__name__)

POINTS_KEY = "/api/rewards/points"
TRANSACTIONS_KEY = "/api/rewards/transactions"
EXPIRING_KEY = "/api/rewards/expiring"
REDEEM_PATH = "/api/rewards/redeem"
TRANSFER_PATH = "/api/rewards/transfer"


@dataclass(frozen=True)
class ChillPointsSnapshot:
    rewards: Optional[RewardsPointsState]
    transactions: tuple[RewardTransaction, ...]
    expiring_points: Optional[ExpiringPoints]
    points_loading: bool
    transactions_loading: bool
    expiring_loading: bool
    error: Optional[Exception]


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    data: Any = None
    error: Optional[str] = None


class ChillPointsStore:
    """
    Per-session rewards state: three cached reads and two mutations.

    Reads go through the QueryCache and are gated on a signed-in session.
    Mutations never touch cached data directly; on success they invalidate
    the points and transactions slots, which refetch from the server.
    """

    def __init__(
        self,
        client: RewardsApiClient,
        cache: QueryCache,
        notifier: Notifier,
        *,
        translator: Optional[Translator] = None,
        session: Optional[UserSession] = None,
    ):
        self.client = client
        self.cache = cache
        self.notifier = notifier
        self.translator = translator or Translator()
        self._session = session

    # ============================================================
    # Session
    # ============================================================
    @property
    def session(self) -> Optional[UserSession]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def sign_in(self, session: UserSession):
        if self._session is not None and self._session.token != session.token:
            self.cache.clear()
        self._session = session

    def sign_out(self):
        self._session = None
        self.cache.clear()
        logger.info("rewards state discarded on sign out")

    # ============================================================
    # Fetchers
    # ============================================================
    def _fetch_points(self) -> Optional[RewardsPointsState]:
        data = self.client.get_json(POINTS_KEY)
        if data is None:
            return None
        return RewardsPointsState.model_validate(data)

    def _fetch_transactions(self) -> tuple[RewardTransaction, ...]:
        data = self.client.get_json(TRANSACTIONS_KEY) or []
        return tuple(RewardTransaction.model_validate(item) for item in data)

    def _fetch_expiring(self) -> Optional[ExpiringPoints]:
        data = self.client.get_json(EXPIRING_KEY)
        if data is None:
            return None
        return ExpiringPoints.model_validate(data)

    # ============================================================
    # Queries
    # ============================================================
    def points_query(self) -> QueryState:
        return self.cache.query(POINTS_KEY, self._fetch_points, enabled=self.is_authenticated, default=None)

    def transactions_query(self) -> QueryState:
        return self.cache.query(TRANSACTIONS_KEY, self._fetch_transactions, enabled=self.is_authenticated, default=())

    def expiring_query(self) -> QueryState:
        return self.cache.query(EXPIRING_KEY, self._fetch_expiring, enabled=self.is_authenticated, default=None)

    def snapshot(self) -> ChillPointsSnapshot:
        points = self.points_query()
        transactions = self.transactions_query()
        expiring = self.expiring_query()

        return ChillPointsSnapshot(
            rewards=points.data,
            transactions=transactions.data or (),
            expiring_points=expiring.data,
            points_loading=points.is_loading,
            transactions_loading=transactions.is_loading,
            expiring_loading=expiring.is_loading,
            error=points.error,
        )

    def refresh_points(self) -> QueryState:
        if not self.is_authenticated:
            return self.points_query()
        return self.cache.refetch(POINTS_KEY)

    def refresh_transactions(self) -> QueryState:
        if not self.is_authenticated:
            return self.transactions_query()
        return self.cache.refetch(TRANSACTIONS_KEY)

    # ============================================================
    # Mutations
    # ============================================================
    def _mutate(self, path: str, build_payload, *, toast_prefix: str) -> MutationResult:
        t = self.translator.t
        try:
            payload = build_payload()
            data = self.client.post_json(path, payload)
        except (ApiError, ValidationError) as e:
            message = getattr(e, "message", None) if isinstance(e, ApiError) else None
            description = message or t(f"rewards.toast.{toast_prefix}ErrorDescription")
            logger.warning("rewards mutation failed", extra={"path": path, "error": str(e)})
            self.notifier.toast(
                t(f"rewards.toast.{toast_prefix}ErrorTitle"),
                description,
                variant="destructive",
            )
            return MutationResult(ok=False, error=description)

        self.cache.invalidate(POINTS_KEY)
        self.cache.invalidate(TRANSACTIONS_KEY)
        self.notifier.toast(
            t(f"rewards.toast.{toast_prefix}SuccessTitle"),
            t(f"rewards.toast.{toast_prefix}SuccessDescription"),
        )
        logger.info("rewards mutation succeeded", extra={"path": path})
        return MutationResult(ok=True, data=data)

    def redeem(self, points: int, description: str) -> MutationResult:
        return self._mutate(
            REDEEM_PATH,
            lambda: RedeemRequest(points=points, description=description).model_dump(),
            toast_prefix="redeem",
        )

    def transfer(self, points: int, recipient_email: str, description: str = "") -> MutationResult:
        if not (description or "").strip():
            description = self.translator.t("rewards.transfer.defaultDescription", email=recipient_email)
        return self._mutate(
            TRANSFER_PATH,
            lambda: TransferRequest(
                points=points,
                recipientEmail=recipient_email,
                description=description,
            ).model_dump(),
            toast_prefix="transfer",
        )
