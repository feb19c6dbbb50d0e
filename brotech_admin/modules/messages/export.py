"""
CSV export of the filtered and sorted message list.
"""

import csv
import io
from datetime import timezone

from ...core.store import utc_now

CSV_HEADERS = ['ID', 'Name', 'Email', 'Subject', 'Message', 'Date Received']


def iso_instant(value):
    """ISO-8601 UTC instant with millisecond precision, e.g. 2024-05-01T10:00:00.000Z"""
    if value is None:
        return ''
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


def messages_to_csv(messages):
    """Serialize messages to CSV text.

    The header row is bare; every data field is double-quoted with embedded
    quotes doubled. Rows are separated by a single newline.
    """
    buf = io.StringIO()
    buf.write(','.join(CSV_HEADERS) + '\n')
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for msg in messages:
        writer.writerow([
            msg.get('id', ''),
            msg.get('name', ''),
            msg.get('email', ''),
            msg.get('subject', ''),
            msg.get('message', ''),
            iso_instant(msg.get('createdAt')),
        ])
    return buf.getvalue().rstrip('\n')


def export_filename(today=None):
    """messages_export_{YYYY-MM-DD}.csv, dated by the export, not the records"""
    if today is None:
        today = utc_now().date()
    return f"messages_export_{today.isoformat()}.csv"
