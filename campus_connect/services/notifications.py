from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple

TODAY_LABEL = 'Today'
TOMORROW_LABEL = 'Tomorrow'


class Notification(NamedTuple):
    event: dict
    label: str


def _event_day(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def upcoming_within(events: Iterable[dict], today: date) -> list[Notification]:
    """Events falling on ``today`` or the next calendar day, in input order."""
    tomorrow = today + timedelta(days=1)
    notifications: list[Notification] = []

    for event in events:
        event_day = _event_day(event['date'])
        if event_day == today:
            notifications.append(Notification(event, TODAY_LABEL))
        elif event_day == tomorrow:
            notifications.append(Notification(event, TOMORROW_LABEL))

    return notifications
