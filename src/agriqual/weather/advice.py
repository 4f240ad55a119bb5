"""Rule-based farming advice derived from a forecast snapshot."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from agriqual.weather.models import CurrentConditions, TodayForecast

Condition = Callable[[CurrentConditions, TodayForecast], bool]

RAIN_ADVICE = "Rain expected today: postpone irrigation and N top-dress; check low fields for waterlogging."
NO_RAIN_ADVICE = "No significant rain today: if soil is dry, plan irrigation early morning or late evening."
WINDY_ADVICE = "Windy conditions: avoid pesticide/herbicide spraying; secure mulches and covers."
CALM_ADVICE = "Calmer winds: if spraying is needed, this is a suitable window."
HEAT_ADVICE = "High heat: shallow irrigation to reduce stress; avoid transplanting at midday; monitor for wilting."
COLD_ADVICE = "Cold risk: use row covers for sensitive crops; avoid night irrigation."
UV_ADVICE = "Strong UV: schedule field work earlier/later; ensure sun protection for workers."

RAIN_THRESHOLD_MM = 2
WIND_SPEED_THRESHOLD_KMH = 25
WIND_GUST_THRESHOLD_KMH = 40
HEAT_THRESHOLD_C = 35
COLD_THRESHOLD_C = 5
UV_THRESHOLD = 8


def at_least(value: Optional[float], threshold: float) -> bool:
    """Compare against a threshold; a missing value never meets it."""
    return value is not None and value >= threshold


def at_most(value: Optional[float], threshold: float) -> bool:
    """Compare against a threshold; a missing value never meets it."""
    return value is not None and value <= threshold


@dataclass(frozen=True)
class AdviceRule:
    """One entry of the advice table.

    Branches are checked in order and the first match contributes its advice.
    ``otherwise`` is contributed when no branch matches.
    """
    name: str
    branches: Sequence[Tuple[Condition, str]]
    otherwise: Optional[str] = None

    def evaluate(self, current: CurrentConditions, today: TodayForecast) -> Optional[str]:
        for condition, advice in self.branches:
            if condition(current, today):
                return advice
        return self.otherwise


ADVICE_RULES: Tuple[AdviceRule, ...] = (
    AdviceRule(
        name="rain",
        branches=[
            (lambda current, today: at_least(today.precipitation_mm, RAIN_THRESHOLD_MM), RAIN_ADVICE),
        ],
        otherwise=NO_RAIN_ADVICE,
    ),
    AdviceRule(
        name="wind",
        branches=[
            (
                lambda current, today: (
                    at_least(current.wind_speed_kmh, WIND_SPEED_THRESHOLD_KMH)
                    or at_least(today.wind_gust_max_kmh, WIND_GUST_THRESHOLD_KMH)
                ),
                WINDY_ADVICE,
            ),
        ],
        otherwise=CALM_ADVICE,
    ),
    AdviceRule(
        name="temperature",
        branches=[
            (lambda current, today: at_least(today.tmax_c, HEAT_THRESHOLD_C), HEAT_ADVICE),
            (lambda current, today: at_most(today.tmin_c, COLD_THRESHOLD_C), COLD_ADVICE),
        ],
    ),
    AdviceRule(
        name="uv",
        branches=[
            (lambda current, today: at_least(today.uv_index_max, UV_THRESHOLD), UV_ADVICE),
        ],
    ),
)


@dataclass
class AdviceEngine:
    """Evaluates an ordered rule table."""
    rules: Sequence[AdviceRule] = field(default_factory=lambda: ADVICE_RULES)

    def derive(self, current: CurrentConditions, today: TodayForecast) -> List[str]:
        advice = []
        for rule in self.rules:
            result = rule.evaluate(current, today)
            if result:
                advice.append(result)
        return advice


def derive_advice(current: CurrentConditions, today: TodayForecast) -> List[str]:
    """Derive ordered advice strings from current conditions and today's forecast."""
    return AdviceEngine().derive(current, today)
