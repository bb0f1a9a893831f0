import math
import re
from typing import Optional

from pydantic import BaseModel

from chillpoints.services.i18n import Translator


EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

# Redemption dialog rules: 100 points buy 5 currency units, capped per redemption.
MAX_REDEEM_POINTS = 10000
POINTS_PER_DISCOUNT_STEP = 100
DISCOUNT_PER_STEP = 5


class RedeemQuote(BaseModel):
    points: int
    available_points: int
    max_points: int
    discount_value: int
    can_proceed: bool


def discount_value(points: int) -> int:
    return (max(int(points), 0) // POINTS_PER_DISCOUNT_STEP) * DISCOUNT_PER_STEP


def quote_redemption(points: int, available_points: int, *, agreed_to_terms: bool = True) -> RedeemQuote:
    available = max(int(available_points or 0), 0)
    max_points = min(available, MAX_REDEEM_POINTS)
    points = int(points or 0)

    return RedeemQuote(
        points=points,
        available_points=available,
        max_points=max_points,
        discount_value=discount_value(points),
        can_proceed=bool(agreed_to_terms) and 0 < points <= max_points,
    )


def _parse_points(raw) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return float(str(raw).strip())
    except ValueError:
        return None


def validate_transfer_form(
    points,
    recipient_email: Optional[str],
    *,
    available_points: int,
    own_email: Optional[str] = None,
    translator: Optional[Translator] = None,
) -> dict[str, str]:
    """
    Field errors for the transfer dialog; an empty dict means submittable.
    """
    t = (translator or Translator()).t
    errors: dict[str, str] = {}

    if points is None or str(points).strip() == "":
        errors["points"] = t("rewards.form.pointsRequired")
    else:
        value = _parse_points(points)
        if value is None or not math.isfinite(value) or value <= 0 or not value.is_integer():
            errors["points"] = t("rewards.form.pointsPositive")
        elif value > available_points:
            errors["points"] = t("rewards.form.notEnoughPoints")

    email = (recipient_email or "").strip()
    if not email:
        errors["recipientEmail"] = t("rewards.form.emailRequired")
    elif not EMAIL_RE.fullmatch(email):
        errors["recipientEmail"] = t("rewards.form.emailInvalid")
    elif own_email and email.lower() == own_email.strip().lower():
        errors["recipientEmail"] = t("rewards.form.selfTransfer")

    return errors
