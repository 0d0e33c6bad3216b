"""
Safety scoring and trust tier classification.

The functions here are pure: they take indicators and thresholds and
return a score, a tier or a tuple of advisory signals. They never touch
the network or the cache.
"""

import math
from typing import Tuple

from defi_trust.config import TierThresholds, TrustThresholds
from defi_trust.models.trust import ContractMetadata, SafetyIndicators, TrustTier

BASELINE_SCORE = 50
VERIFIED_BONUS = 15
RENOUNCED_BONUS = 10
LIQUIDITY_BONUS = 10
HOLDER_BONUS = 10
HONEYPOT_PENALTY = 40
RUG_PULL_WEIGHT = 0.3

LIQUIDITY_BONUS_ABOVE = 70
HOLDER_BONUS_ABOVE = 60

CRITICAL_RUG_RISK_ABOVE = 70
ELEVATED_RUG_RISK_ABOVE = 40
LOW_LIQUIDITY_BELOW = 30
CONCENTRATED_HOLDERS_BELOW = 30

# Advisory signal tags, in emission order
HIGH_RISK = "HIGH_RISK"
HONEYPOT_DETECTED = "HONEYPOT_DETECTED"
UNVERIFIED_CONTRACT = "UNVERIFIED_CONTRACT"
CRITICAL_RUG_RISK = "CRITICAL_RUG_RISK"
ELEVATED_RUG_RISK = "ELEVATED_RUG_RISK"
LOW_LIQUIDITY = "LOW_LIQUIDITY"
CONCENTRATED_HOLDERS = "CONCENTRATED_HOLDERS"
OWNERSHIP_NOT_RENOUNCED = "OWNERSHIP_NOT_RENOUNCED"

TIER_COLORS = {
    TrustTier.RED: "#FF4444",
    TrustTier.YELLOW: "#FFAA00",
    TrustTier.GREEN: "#44FF44",
}


def _round_half_up(value: float) -> int:
    # round() uses banker's rounding; scores round .5 upwards
    return int(math.floor(value + 0.5))


def compute_safety_score(indicators: SafetyIndicators) -> int:
    """
    Compute a 0-100 safety score from raw indicators.

    Inputs are assumed to be in range already; the result is clamped
    regardless, so out-of-range indicators cannot push the score outside
    [0, 100].

    Args:
        indicators: Safety indicators for one contract

    Returns:
        Integer safety score between 0 and 100
    """
    score = float(BASELINE_SCORE)

    if indicators.contract_verified:
        score += VERIFIED_BONUS
    if indicators.has_renounced:
        score += RENOUNCED_BONUS
    if indicators.liquidity_score > LIQUIDITY_BONUS_ABOVE:
        score += LIQUIDITY_BONUS
    if indicators.holder_distribution > HOLDER_BONUS_ABOVE:
        score += HOLDER_BONUS
    if indicators.honeypot_detected:
        score -= HONEYPOT_PENALTY

    score -= RUG_PULL_WEIGHT * indicators.rug_pull_risk

    return max(0, min(100, _round_half_up(score)))


def _meets(metadata: ContractMetadata, indicators: SafetyIndicators,
           thresholds: TierThresholds) -> bool:
    return (
        metadata.safety_score >= thresholds.min_safety_score
        and indicators.rug_pull_risk <= thresholds.max_rug_pull_risk
        and metadata.contract_age >= thresholds.min_contract_age
        and metadata.transaction_volume >= thresholds.min_transaction_volume
    )


def classify_trust_tier(
    metadata: ContractMetadata,
    indicators: SafetyIndicators,
    thresholds: TrustThresholds
) -> TrustTier:
    """
    Classify a contract into a trust tier.

    Rules are applied in order and the first match wins:

    1. A honeypot or an unverified contract is red, whatever else holds.
    2. Rug-pull risk above the yellow maximum is red.
    3. Meeting every green threshold is green.
    4. Meeting every yellow threshold is yellow.
    5. Anything else is red.

    Minimum thresholds are inclusive (``>=``) and maximum thresholds are
    inclusive (``<=``).
    """
    if indicators.honeypot_detected or not indicators.contract_verified:
        return TrustTier.RED

    if indicators.rug_pull_risk > thresholds.yellow.max_rug_pull_risk:
        return TrustTier.RED

    if _meets(metadata, indicators, thresholds.green):
        return TrustTier.GREEN

    if _meets(metadata, indicators, thresholds.yellow):
        return TrustTier.YELLOW

    return TrustTier.RED


def derive_advisory_signals(indicators: SafetyIndicators, tier: TrustTier) -> Tuple[str, ...]:
    """Derive the ordered advisory signal tags for an evaluation."""
    signals = []

    if tier == TrustTier.RED:
        signals.append(HIGH_RISK)
    if indicators.honeypot_detected:
        signals.append(HONEYPOT_DETECTED)
    if not indicators.contract_verified:
        signals.append(UNVERIFIED_CONTRACT)

    if indicators.rug_pull_risk > CRITICAL_RUG_RISK_ABOVE:
        signals.append(CRITICAL_RUG_RISK)
    elif indicators.rug_pull_risk > ELEVATED_RUG_RISK_ABOVE:
        signals.append(ELEVATED_RUG_RISK)

    if indicators.liquidity_score < LOW_LIQUIDITY_BELOW:
        signals.append(LOW_LIQUIDITY)
    if indicators.holder_distribution < CONCENTRATED_HOLDERS_BELOW:
        signals.append(CONCENTRATED_HOLDERS)
    if not indicators.has_renounced:
        signals.append(OWNERSHIP_NOT_RENOUNCED)

    return tuple(signals)


def get_trust_tier_color(tier: TrustTier) -> str:
    """Get the display colour for a trust tier."""
    return TIER_COLORS[TrustTier(tier)]
