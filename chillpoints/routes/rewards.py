from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from chillpoints.deps.session import get_store, get_translator, require_user_session
from chillpoints.schemas.reward_request import RedeemRequest, TransferForm
from chillpoints.services.api_client import UserSession
from chillpoints.services.chill_points_service import ChillPointsStore, MutationResult
from chillpoints.services.i18n import Translator
from chillpoints.services.notifications import Toast
from chillpoints.services.reward_forms import RedeemQuote, quote_redemption, validate_transfer_form
from chillpoints.views.reward_history_table import FilterType, HistoryFilter, RewardHistoryView, build_history_table
from chillpoints.views.reward_stats import RewardStatsView, build_reward_stats
from chillpoints.views.rewards_card import RewardsCardView, build_rewards_card


router = APIRouter(prefix="/rewards", tags=["rewards"])


class ToastOut(BaseModel):
    title: str
    description: str
    variant: str


class MutationResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    toasts: list[ToastOut] = []


def _toasts(items: list[Toast]) -> list[ToastOut]:
    return [ToastOut(title=i.title, description=i.description, variant=i.variant) for i in items]


def _mutation_response(store: ChillPointsStore, result: MutationResult) -> MutationResponse:
    return MutationResponse(ok=result.ok, error=result.error, toasts=_toasts(store.notifier.drain()))


def _card(store: ChillPointsStore, t: Translator) -> RewardsCardView:
    snap = store.snapshot()
    return build_rewards_card(
        snap.rewards,
        snap.expiring_points,
        points_loading=snap.points_loading,
        expiring_loading=snap.expiring_loading,
        error=snap.error,
        t=t.t,
    )


@router.get("/card", response_model=RewardsCardView)
def read_rewards_card(
    store: ChillPointsStore = Depends(get_store),
    t: Translator = Depends(get_translator),
):
    return _card(store, t)


@router.get("/history", response_model=RewardHistoryView)
def read_reward_history(
    type: FilterType = Query(default="all"),
    search: str = Query(default=""),
    store: ChillPointsStore = Depends(get_store),
    t: Translator = Depends(get_translator),
):
    query = store.transactions_query()
    return build_history_table(
        query.data or (),
        HistoryFilter(type=type, search=search),
        transactions_loading=query.is_loading,
        t=t.t,
    )


@router.get("/stats", response_model=RewardStatsView)
def read_reward_stats(
    store: ChillPointsStore = Depends(get_store),
    t: Translator = Depends(get_translator),
):
    snap = store.snapshot()
    return build_reward_stats(
        snap.rewards,
        snap.expiring_points,
        loading=snap.points_loading or snap.expiring_loading,
        t=t.t,
    )


@router.get("/redeem/quote", response_model=RedeemQuote)
def read_redeem_quote(
    points: int = Query(default=500, ge=0),
    store: ChillPointsStore = Depends(get_store),
):
    rewards = store.points_query().data
    available = rewards.points if rewards is not None else 0
    return quote_redemption(points, available)


@router.post("/redeem", response_model=MutationResponse)
def redeem_points(
    payload: RedeemRequest,
    session: UserSession = Depends(require_user_session),
    store: ChillPointsStore = Depends(get_store),
):
    result = store.redeem(payload.points, payload.description)
    return _mutation_response(store, result)


@router.post("/transfer", response_model=MutationResponse)
def transfer_points(
    payload: TransferForm,
    session: UserSession = Depends(require_user_session),
    store: ChillPointsStore = Depends(get_store),
    t: Translator = Depends(get_translator),
):
    rewards = store.points_query().data
    available = rewards.points if rewards is not None else 0

    errors = validate_transfer_form(
        payload.points,
        payload.recipientEmail,
        available_points=available,
        own_email=session.email,
        translator=t,
    )
    if errors:
        raise HTTPException(status_code=400, detail=errors)

    result = store.transfer(int(float(payload.points)), payload.recipientEmail.strip(), payload.description or "")
    return _mutation_response(store, result)


@router.post("/refresh", response_model=RewardsCardView)
def refresh_rewards(
    session: UserSession = Depends(require_user_session),
    store: ChillPointsStore = Depends(get_store),
    t: Translator = Depends(get_translator),
):
    store.refresh_points()
    store.refresh_transactions()
    return _card(store, t)


@router.delete("/session")
def end_rewards_session(request: Request, session: UserSession = Depends(require_user_session)):
    discarded = request.app.state.stores.discard(session)
    return {"discarded": discarded}
