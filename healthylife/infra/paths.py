from healthylife.utilities.config import DATA_DIR

# Centralized paths for data files (single source of truth)
CALORIE_HISTORY_FILE = DATA_DIR / 'calorie_history.json'
MEALS_FILE = DATA_DIR / 'meals.json'

__all__ = ['DATA_DIR', 'CALORIE_HISTORY_FILE', 'MEALS_FILE']
