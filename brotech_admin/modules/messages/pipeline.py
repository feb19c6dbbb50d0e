"""
Messages List Pipeline
======================

filter -> sort -> paginate over a snapshot of the contacts collection.
Everything happens in memory on the full snapshot; the store is only asked
for all messages.
"""

import math

PAGE_SIZE = 10
SEARCH_FIELDS = ('name', 'email', 'subject', 'message')
SORT_ORDERS = ('asc', 'desc')
DEFAULT_SORT = 'desc'


def dated_messages(messages):
    """Messages that carry a createdAt; undated records are never listed"""
    return [msg for msg in messages if msg.get('createdAt') is not None]


def filter_messages(messages, query):
    """Keep messages where any searchable field contains ``query`` (case-insensitive)"""
    term = (query or '').lower()
    if not term:
        return list(messages)
    return [
        msg for msg in messages
        if any(term in str(msg.get(field) or '').lower() for field in SEARCH_FIELDS)
    ]


def sort_messages(messages, order=DEFAULT_SORT):
    """Order by createdAt; ties keep their incoming order in both directions.

    Records without a createdAt are left out.
    """
    if order not in SORT_ORDERS:
        order = DEFAULT_SORT
    indexed = list(enumerate(dated_messages(messages)))
    if order == 'asc':
        indexed.sort(key=lambda pair: (pair[1]['createdAt'], pair[0]))
    else:
        # Negate the position so equal timestamps still come out in input order
        indexed.sort(key=lambda pair: (pair[1]['createdAt'], -pair[0]), reverse=True)
    return [msg for _, msg in indexed]


def toggle_order(order):
    return 'asc' if order == 'desc' else 'desc'


def total_pages(count, page_size=PAGE_SIZE):
    """Number of pages; an empty list still has one (empty) page"""
    return max(1, math.ceil(count / page_size))


def clamp_page(page, pages):
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    return min(max(page, 1), pages)


def paginate(messages, page, page_size=PAGE_SIZE):
    """Slice one page out of ``messages``.

    Returns a dict with the page items, the clamped page number and the
    page count.
    """
    pages = total_pages(len(messages), page_size)
    page = clamp_page(page, pages)
    start = (page - 1) * page_size
    return {
        'items': messages[start:start + page_size],
        'page': page,
        'total_pages': pages,
        'total': len(messages),
        'has_prev': page > 1,
        'has_next': page < pages,
    }


def run_pipeline(messages, query='', order=DEFAULT_SORT, page=1, page_size=PAGE_SIZE):
    """Filter, sort and paginate. ``sorted`` is the full result used by exports."""
    filtered = filter_messages(dated_messages(messages), query)
    ordered = sort_messages(filtered, order)
    result = paginate(ordered, page, page_size)
    result['sorted'] = ordered
    result['query'] = query or ''
    result['order'] = order if order in SORT_ORDERS else DEFAULT_SORT
    return result


class MessageListState:
    """View state for the messages screen.

    Holds the snapshot plus the query, sort order and page the operator has
    chosen. Setting a new query sends the operator back to the first page.
    """

    def __init__(self, messages=None, query='', order=DEFAULT_SORT, page=1, page_size=PAGE_SIZE):
        self.messages = list(messages or [])
        self.query = query or ''
        self.order = order if order in SORT_ORDERS else DEFAULT_SORT
        self.page_size = page_size
        self.page = 1
        self.go_to(page)

    def set_query(self, query):
        query = query or ''
        if query != self.query:
            self.query = query
            self.page = 1

    def toggle_sort(self):
        self.order = toggle_order(self.order)

    def go_to(self, page):
        self.page = clamp_page(page, self.total_pages)

    def next_page(self):
        self.go_to(self.page + 1)

    def prev_page(self):
        self.go_to(self.page - 1)

    def remove(self, message_id):
        """Drop a message locally; call only after the store confirmed the delete"""
        self.messages = [m for m in self.messages if m.get('id') != message_id]
        self.go_to(self.page)

    @property
    def total_pages(self):
        return total_pages(len(filter_messages(dated_messages(self.messages), self.query)), self.page_size)

    def result(self):
        return run_pipeline(self.messages, self.query, self.order, self.page, self.page_size)
