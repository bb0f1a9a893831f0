import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

import requests

from chillpoints.config import Settings
from chillpoints.services.api_client import RewardsApiClient, UserSession
from chillpoints.services.chill_points_service import ChillPointsStore
from chillpoints.services.i18n import Translator
from chillpoints.services.notifications import Notifier
from chillpoints.services.query_cache import QueryCache
from chillpoints.views.reward_history_table import clear_filter_memo


logger = logging.getLogger(__name__)


class StoreRegistry:
    """
    One ChillPointsStore per session token, plus a shared signed-out store.

    Held stores are capped at cache.max_sessions (least recently used goes
    first) and dropped once idle for cache.session_idle_seconds.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_factory: Callable[[], requests.Session] = requests.Session,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.max_sessions = settings.cache.max_sessions
        self.idle_seconds = settings.cache.session_idle_seconds
        self._http_factory = http_factory
        self._clock = clock
        # token -> (store, last_used)
        self._stores: OrderedDict[str, tuple[ChillPointsStore, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._anonymous = self._build(None)

    def _build(self, session: Optional[UserSession]) -> ChillPointsStore:
        store: Optional[ChillPointsStore] = None
        # the client reads the token from the store's current session
        client = RewardsApiClient(
            self.settings.api,
            session_provider=lambda: store.session if store is not None else None,
            http=self._http_factory(),
        )
        store = ChillPointsStore(
            client,
            QueryCache(stale_seconds=self.settings.cache.stale_seconds),
            Notifier(),
            translator=Translator(self.settings.ui.default_locale),
            session=session,
        )
        return store

    def _release(self, stores: list[ChillPointsStore]):
        for store in stores:
            store.sign_out()
            store.client.close()
        if stores:
            clear_filter_memo()

    def _collect_expired(self, now: float) -> list[ChillPointsStore]:
        # caller holds self._lock; oldest entries sit at the front
        expired = []
        while self._stores:
            store, last_used = next(iter(self._stores.values()))
            if now - last_used < self.idle_seconds:
                break
            self._stores.popitem(last=False)
            expired.append(store)
        return expired

    def get(self, session: Optional[UserSession]) -> ChillPointsStore:
        if session is None:
            return self._anonymous

        now = self._clock()
        with self._lock:
            evicted = self._collect_expired(now)

            entry = self._stores.pop(session.token, None)
            if entry is None:
                store = self._build(session)
                logger.info("rewards store created", extra={"sessions": len(self._stores) + 1})
            else:
                store = entry[0]
                if store.session != session:
                    store.sign_in(session)
            self._stores[session.token] = (store, now)

            while len(self._stores) > self.max_sessions:
                _, (oldest, _) = self._stores.popitem(last=False)
                evicted.append(oldest)

        if evicted:
            logger.info("rewards stores evicted", extra={"evicted": len(evicted)})
        self._release(evicted)
        return store

    def __len__(self) -> int:
        with self._lock:
            return len(self._stores)

    def discard(self, session: Optional[UserSession]) -> bool:
        if session is None:
            return False
        with self._lock:
            entry = self._stores.pop(session.token, None)
        if entry is None:
            return False
        self._release([entry[0]])
        return True

    def close(self):
        with self._lock:
            stores = [store for store, _ in self._stores.values()]
            self._stores.clear()
        self._release(stores)
        self._anonymous.client.close()
