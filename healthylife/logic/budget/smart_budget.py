"""Smart calorie budget.

Looks at the last BUDGET_WINDOW_DAYS days of history and nudges the goal:
  - average intake more than 10% over the average goal -> goal * 0.9
  - average intake more than 10% under the average goal -> goal * 1.1
  - otherwise keep the average goal
The suggestion is clamped to [MIN_CALORIE_GOAL, MAX_CALORIE_GOAL].
"""
import math
from datetime import date as _date, timedelta
from typing import Dict, Any, List, Optional

from healthylife.domain.CalorieDay import CalorieDay
from healthylife.utilities.constants import (
    BUDGET_WINDOW_DAYS,
    BUDGET_VARIANCE_THRESHOLD,
    DEFAULT_CALORIE_GOAL,
    MIN_CALORIE_GOAL,
    MAX_CALORIE_GOAL,
)


def _round_half_up(value: float) -> int:
    """0.5 always rounds up (1912.5 -> 1913), unlike round()."""
    return int(math.floor(value + 0.5))


def window_start(today: Optional[_date] = None) -> _date:
    return (today or _date.today()) - timedelta(days=BUDGET_WINDOW_DAYS)


def compute_smart_budget(history: List[CalorieDay], today: Optional[_date] = None) -> Dict[str, Any]:
    since = window_start(today)
    recent = [h for h in history if h.day >= since]
    if not recent:
        return {
            'suggestedGoal': DEFAULT_CALORIE_GOAL,
            'reason': f'No history found; defaulting to {DEFAULT_CALORIE_GOAL} kcal',
            'daysAnalyzed': 0,
        }

    avg_goal = sum(h.daily_goal for h in recent) / len(recent)
    avg_intake = sum(h.daily_intake for h in recent) / len(recent)
    variance_pct = (avg_intake - avg_goal) / max(1, avg_goal)

    suggested = avg_goal
    reason = 'Maintaining current average goal based on recent history.'
    if variance_pct > BUDGET_VARIANCE_THRESHOLD:
        suggested = _round_half_up(avg_goal * 0.9)
        reason = 'Average intake exceeded goal by >10%. Suggest reducing goal by ~10%.'
    elif variance_pct < -BUDGET_VARIANCE_THRESHOLD:
        suggested = _round_half_up(avg_goal * 1.1)
        reason = 'Average intake was below goal by >10%. Suggest increasing goal by ~10% to match appetite/needs.'

    suggested = min(MAX_CALORIE_GOAL, max(MIN_CALORIE_GOAL, suggested))
    return {
        'suggestedGoal': _round_half_up(suggested),
        'reason': reason,
        'daysAnalyzed': len(recent),
        'avgGoal': _round_half_up(avg_goal),
        'avgIntake': _round_half_up(avg_intake),
    }


__all__ = ['compute_smart_budget', 'window_start']
