from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional


logger = logging.getLogger(__name__)

EN_MESSAGES = {
    "rewards.chillPoints": "Chill Points",
    "rewards.noRewardsTitle": "No rewards yet",
    "rewards.noRewardsDescription": "You have not earned any Chill Points so far.",
    "rewards.startEarning": "Book a stay to start earning points.",
    "rewards.errorTitle": "Rewards unavailable",
    "rewards.errorDescription": "We could not load your rewards. Please try again later.",
    "rewards.availablePoints": "Available points",
    "rewards.currentTier": "Current tier",
    "rewards.nextTier": "Next tier",
    "rewards.toNextTier": "to next tier",
    "rewards.expiringPoints": "{count} points expiring soon",
    "rewards.firstExpiryDate": "First expiry",
    "rewards.tierBenefits": "Tier benefits",
    "rewards.totalEarned": "Total earned",
    "rewards.totalRedeemed": "Total redeemed",
    "rewards.availableBalance": "Available balance",
    "rewards.transactions": "Transactions",
    "rewards.tierMessages.silver": "Welcome to Silver. Keep booking to reach Gold.",
    "rewards.tierMessages.gold": "You are a Gold member. Platinum is within reach.",
    "rewards.tierMessages.platinum": "You have reached Platinum, our highest tier.",
    "rewards.transactionTypes.earn": "Earned",
    "rewards.transactionTypes.redeem": "Redeemed",
    "rewards.transactionTypes.transfer": "Transferred",
    "rewards.transactionTypes.expire": "Expired",
    "rewards.noTransactionsFound": "No transactions found",
    "rewards.noFilteredResults": "No transactions match your filters",
    "rewards.filterByType": "Filter by type",
    "rewards.allTransactions": "All transactions",
    "rewards.searchTransactions": "Search transactions",
    "rewards.date": "Date",
    "rewards.type": "Type",
    "rewards.description": "Description",
    "rewards.points": "Points",
    "rewards.expiringSoonTitle": "Points Expiring Soon",
    "rewards.expiringSoonDescription": "You have {count} points expiring {when}",
    "rewards.expiringSoonHint": "Use your points before they expire to get exclusive benefits!",
    "rewards.toast.redeemSuccessTitle": "Points redeemed",
    "rewards.toast.redeemSuccessDescription": "Your points were redeemed and your balance updated.",
    "rewards.toast.redeemErrorTitle": "Redemption failed",
    "rewards.toast.redeemErrorDescription": "Something went wrong while redeeming your points.",
    "rewards.toast.transferSuccessTitle": "Points transferred",
    "rewards.toast.transferSuccessDescription": "Your points were sent to the recipient.",
    "rewards.toast.transferErrorTitle": "Transfer failed",
    "rewards.toast.transferErrorDescription": "Something went wrong while transferring your points.",
    "rewards.transfer.defaultDescription": "Points transfer to {email}",
    "rewards.form.pointsRequired": "Points amount is required",
    "rewards.form.pointsPositive": "Points must be a positive number",
    "rewards.form.notEnoughPoints": "You don't have enough points",
    "rewards.form.emailRequired": "Recipient email is required",
    "rewards.form.emailInvalid": "Invalid email address",
    "rewards.form.selfTransfer": "You cannot transfer points to yourself",
}

CATALOGS = {"en": EN_MESSAGES}
DEFAULT_LOCALE = "en"


class Translator:
    def __init__(self, locale: str = DEFAULT_LOCALE, catalog: Optional[dict[str, str]] = None):
        self.locale = locale
        self.catalog = catalog if catalog is not None else CATALOGS.get(locale, EN_MESSAGES)

    def t(self, key: str, **params) -> str:
        template = self.catalog.get(key)
        if template is None:
            logger.debug("missing translation", extra={"key": key, "locale": self.locale})
            return key
        if not params:
            return template
        try:
            return template.format(**params)
        except (KeyError, IndexError, ValueError):
            return template

    __call__ = t


def negotiate_locale(accept_language: Optional[str], default: str = DEFAULT_LOCALE) -> str:
    """Pick the first Accept-Language entry we have a catalog for."""
    if not accept_language:
        return default

    weighted = []
    for i, part in enumerate(accept_language.split(",")):
        tag, _, params = part.strip().partition(";")
        if not tag:
            continue
        q = 1.0
        if params.strip().startswith("q="):
            try:
                q = float(params.strip()[2:])
            except ValueError:
                q = 0.0
        weighted.append((-q, i, tag.strip()))

    for _, _, tag in sorted(weighted):
        base = tag.split("-")[0].lower()
        if base in CATALOGS:
            return base
    return default


# ============================================================
# Dates
# ============================================================
def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_date(value: date | datetime) -> str:
    """Long date, e.g. 'October 17th, 2026'."""
    return f"{value:%B} {_ordinal(value.day)}, {value.year}"


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def _distance_words(seconds: float) -> str:
    minutes = round(seconds / 60)
    if seconds < 30:
        return "less than a minute"
    if minutes < 45:
        return _plural(max(minutes, 1), "minute")
    if minutes < 90:
        return "about 1 hour"
    hours = round(minutes / 60)
    if minutes < 24 * 60:
        return f"about {_plural(hours, 'hour')}"
    days = round(minutes / (24 * 60))
    if days < 30:
        return _plural(days, "day")
    months = round(days / 30)
    if months < 12:
        return _plural(months, "month")
    return _plural(round(days / 365), "year")


def format_relative(when: datetime, now: Optional[datetime] = None) -> str:
    """Distance to now with a direction, e.g. 'in 3 days' or '2 hours ago'."""
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    delta = (_as_utc(when) - now).total_seconds()
    words = _distance_words(abs(delta))
    return f"in {words}" if delta >= 0 else f"{words} ago"
