from datetime import date, datetime

from campus_connect.services.notifications import TODAY_LABEL, TOMORROW_LABEL, upcoming_within

TODAY = date(2026, 3, 10)


def test_upcoming_within_tags_today_and_tomorrow_only() -> None:
    events = [
        {'id': 1, 'date': date(2026, 3, 10)},
        {'id': 2, 'date': date(2026, 3, 11)},
        {'id': 3, 'date': date(2026, 3, 12)},
    ]

    notifications = upcoming_within(events, TODAY)

    assert [(notification.event['id'], notification.label) for notification in notifications] == [
        (1, TODAY_LABEL),
        (2, TOMORROW_LABEL),
    ]


def test_upcoming_within_uses_calendar_days() -> None:
    events = [
        {'id': 1, 'date': datetime(2026, 3, 11, 23, 59)},
        {'id': 2, 'date': '2026-03-10'},
        {'id': 3, 'date': date(2026, 3, 9)},
    ]

    notifications = upcoming_within(events, TODAY)

    assert [(notification.event['id'], notification.label) for notification in notifications] == [
        (1, 'Tomorrow'),
        (2, 'Today'),
    ]


def test_upcoming_within_handles_month_end() -> None:
    notifications = upcoming_within([{'id': 5, 'date': date(2026, 4, 1)}], date(2026, 3, 31))

    assert notifications[0].label == 'Tomorrow'


def test_upcoming_within_empty() -> None:
    assert upcoming_within([], TODAY) == []
