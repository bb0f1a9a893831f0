from functools import lru_cache
from typing import Callable, Iterable, Literal, Optional

from pydantic import BaseModel

from chillpoints.schemas.reward_transaction import RewardTransaction
from chillpoints.services.i18n import format_date


FilterType = Literal["all", "earn", "redeem", "transfer"]

TYPE_COLORS = {
    "earn": "green",
    "redeem": "amber",
    "transfer": "blue",
    "expire": "red",
}

CREDIT_TYPES = {"earn", "transfer"}
DEBIT_TYPES = {"redeem", "expire"}


class HistoryFilter(BaseModel):
    type: FilterType = "all"
    search: str = ""

    class Config:
        frozen = True


class HistoryRowView(BaseModel):
    id: int
    date: str
    type: str
    type_label: str
    type_color: str
    description: str
    points: int
    points_display: str
    direction: Optional[Literal["up", "down"]] = None
    tone: Optional[Literal["positive", "negative"]] = None


class RewardHistoryView(BaseModel):
    state: Literal["loading", "empty", "populated"]
    filters: HistoryFilter = HistoryFilter()
    columns: list[str] = []
    rows: list[HistoryRowView] = []
    total_count: int = 0
    empty_message: Optional[str] = None
    no_filtered_results: bool = False


# entries pin transaction lists; cleared whenever a session store is released
@lru_cache(maxsize=8)
def _filter_cached(transactions: tuple[RewardTransaction, ...], filters: HistoryFilter) -> tuple[RewardTransaction, ...]:
    needle = filters.search.lower()
    out = []
    for tx in transactions:
        if filters.type != "all" and tx.transaction_type != filters.type:
            continue
        if needle and needle not in tx.description.lower():
            continue
        out.append(tx)
    return tuple(out)


def clear_filter_memo():
    _filter_cached.cache_clear()


def filter_transactions(
    transactions: Iterable[RewardTransaction],
    filters: HistoryFilter,
) -> tuple[RewardTransaction, ...]:
    return _filter_cached(tuple(transactions or ()), filters)


def _row(tx: RewardTransaction, t: Callable[..., str]) -> HistoryRowView:
    kind = tx.transaction_type
    if kind in CREDIT_TYPES:
        direction, tone, display = "up", "positive", f"+{tx.points}"
    elif kind in DEBIT_TYPES:
        direction, tone, display = "down", "negative", f"-{tx.points}"
    else:
        direction, tone, display = None, None, str(tx.points)

    return HistoryRowView(
        id=tx.id,
        date=format_date(tx.created_at),
        type=kind,
        type_label=t(f"rewards.transactionTypes.{kind}"),
        type_color=TYPE_COLORS.get(kind, "gray"),
        description=tx.description,
        points=tx.points,
        points_display=display,
        direction=direction,
        tone=tone,
    )


def build_history_table(
    transactions: Iterable[RewardTransaction],
    filters: HistoryFilter,
    *,
    transactions_loading: bool,
    t: Callable[..., str],
) -> RewardHistoryView:
    if transactions_loading:
        return RewardHistoryView(state="loading", filters=filters)

    transactions = tuple(transactions or ())
    if not transactions:
        return RewardHistoryView(
            state="empty",
            filters=filters,
            empty_message=t("rewards.noTransactionsFound"),
        )

    visible = filter_transactions(transactions, filters)
    return RewardHistoryView(
        state="populated",
        filters=filters,
        columns=[t("rewards.date"), t("rewards.type"), t("rewards.description"), t("rewards.points")],
        rows=[_row(tx, t) for tx in visible],
        total_count=len(transactions),
        empty_message=t("rewards.noFilteredResults") if not visible else None,
        no_filtered_results=not visible,
    )
