"""CalorieDay entity: one user's calorie goal and actual intake for a date."""
from datetime import date, datetime
from healthylife.utilities.constants import DATE_FORMAT


class CalorieDay:
    def __init__(self, user_id: str = "", day: date = None, daily_goal: float = 0, daily_intake: float = 0):
        self.user_id = user_id
        self.day = day or date.today()
        self.daily_goal = daily_goal
        self.daily_intake = daily_intake

    def __str__(self) -> str:
        return f"{self.user_id} - {self.day.strftime(DATE_FORMAT)} - {self.daily_intake}/{self.daily_goal} kcal"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a CalorieDay from a stored dictionary. Unparseable dates fall back to today.'''
        d = dict(data) if isinstance(data, dict) else {}
        raw_day = d.get("date")
        if isinstance(raw_day, (datetime, date)):
            day = raw_day if not isinstance(raw_day, datetime) else raw_day.date()
        else:
            try:
                day = datetime.strptime(str(raw_day), DATE_FORMAT).date()
            except ValueError:
                day = date.today()
        return CalorieDay(
            user_id=str(d.get("user_id") or ""),
            day=day,
            daily_goal=float(d.get("daily_goal") or 0),
            daily_intake=float(d.get("daily_intake") or 0),
        )

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "date": self.day.strftime(DATE_FORMAT),
            "daily_goal": self.daily_goal,
            "daily_intake": self.daily_intake,
        }
