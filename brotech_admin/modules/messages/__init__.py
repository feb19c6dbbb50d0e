"""
Messages Module
===============

Contact form submissions from the public website.

Provides:
- Searchable, sortable, paginated message list
- Message detail view with AI summary and reply draft
- Delete with confirmation
- CSV export of the current filtered view
"""

from flask import Blueprint

messages_bp = Blueprint(
    'messages',
    __name__,
    url_prefix='/admin/messages',
    template_folder='templates',
)

from . import routes

__all__ = ['messages_bp']
