"""
Dashboard Aggregation
=====================

Statistics and the 7-day activity chart for the admin dashboard.

The document store has no grouping support, so counts are derived from
snapshots on our side, and the chart issues one range query per day. The
per-day queries run concurrently and are joined before anything is rendered.
"""

import math
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import tzlocal

from ...core.config import get_config_value
from ...core.fanout import fan_out
from ...core.store import utc_now

WEEKDAY_LABELS = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
NOT_SET = 'Not Set'
NEW_MESSAGE_WINDOW = timedelta(hours=24)
RECENT_MESSAGE_LIMIT = 5
HISTOGRAM_DAYS = 7
CHART_HEIGHT = 180


def get_site_timezone():
    """Zone used for day boundaries; falls back to the server's local zone (DST-aware)"""
    name = get_config_value('SITE_TIMEZONE')
    if name:
        return ZoneInfo(name)
    return tzlocal.get_localzone()


def count_since(records, cutoff):
    """Number of records whose createdAt is at or after ``cutoff``"""
    return sum(1 for r in records if r.get('createdAt') is not None and r['createdAt'] >= cutoff)


def total_count(records):
    return len(records)


def most_popular_plan_title(plans):
    """Title of the first plan flagged mostPopular, or 'Not Set'.

    Several plans may carry the flag at once; the first one wins.
    """
    for plan in plans:
        if plan.get('mostPopular') is True:
            return plan.get('title') or NOT_SET
    return NOT_SET


def day_windows(today, tz):
    """Seven (label, start, end) windows ending with ``today``, oldest first.

    Each window runs from local midnight to the next local midnight; ``end``
    is exclusive.
    """
    windows = []
    for offset in range(HISTOGRAM_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
        windows.append((WEEKDAY_LABELS[day.weekday()], start, end))
    return windows


def weekly_histogram(records, today, tz=None):
    """Messages per day for the week ending ``today``.

    Returns exactly seven ``{'label', 'count'}`` entries, oldest first.
    """
    if tz is None:
        tz = get_site_timezone()
    histogram = []
    for label, start, end in day_windows(today, tz):
        count = sum(
            1 for r in records
            if r.get('createdAt') is not None and start <= r['createdAt'] < end
        )
        histogram.append({'label': label, 'count': count})
    return histogram


def bar_heights(histogram, chart_height=CHART_HEIGHT):
    """Bar heights scaled to the busiest day; all zero when nothing happened"""
    max_count = max((entry['count'] for entry in histogram), default=0)
    if max_count == 0:
        return [0 for _ in histogram]
    return [entry['count'] / max_count * chart_height for entry in histogram]


def chart_geometry(histogram, chart_height=CHART_HEIGHT):
    """Everything the chart template needs: bars and y-axis ticks"""
    max_count = max((entry['count'] for entry in histogram), default=0)
    heights = bar_heights(histogram, chart_height)
    bars = [
        {'label': entry['label'], 'count': entry['count'], 'height': round(height, 2)}
        for entry, height in zip(histogram, heights)
    ]
    ticks = []
    for value in (0, math.ceil(max_count / 2), max_count):
        if value not in ticks:
            ticks.append(value)
    return {'bars': bars, 'ticks': ticks, 'max': max_count, 'height': chart_height}


def load_dashboard(store, now=None, tz=None):
    """Fetch and aggregate everything the dashboard shows.

    All queries are issued concurrently; if any of them fails the whole load
    fails and the caller shows one error instead of partial data.
    """
    if now is None:
        now = utc_now()
    if tz is None:
        tz = get_site_timezone()

    cutoff = now - NEW_MESSAGE_WINDOW
    today = now.astimezone(tz).date()
    windows = day_windows(today, tz)

    tasks = {
        'new_messages': lambda: store.contacts.list(where=[('createdAt', '>=', cutoff)]),
        'all_messages': lambda: store.contacts.list(),
        'plans': lambda: store.pricing_plans.list(),
        'popular_plan': lambda: store.pricing_plans.list(where=[('mostPopular', '==', True)], limit=1),
        'recent_messages': lambda: store.contacts.list(
            order_by=('createdAt', 'desc'), limit=RECENT_MESSAGE_LIMIT),
    }
    for index, (_, start, end) in enumerate(windows):
        tasks[f'day_{index}'] = (
            lambda start=start, end=end: store.contacts.count(
                where=[('createdAt', '>=', start), ('createdAt', '<', end)])
        )

    results = fan_out(tasks)

    chart = [
        {'label': label, 'count': results[f'day_{index}']}
        for index, (label, _, _) in enumerate(windows)
    ]

    return {
        'stats': {
            'newMessages': count_since(results['new_messages'], cutoff),
            'totalMessages': total_count(results['all_messages']),
            'totalPlans': total_count(results['plans']),
            'mostPopularPlan': most_popular_plan_title(results['popular_plan']),
        },
        'recentMessages': results['recent_messages'],
        'chart': chart,
    }
