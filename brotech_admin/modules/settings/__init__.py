"""
Settings Module
===============

Admin UI for the site-wide settings the public website reads: contact
details, social links and the impact numbers.
"""

from flask import Blueprint

settings_bp = Blueprint(
    'settings',
    __name__,
    url_prefix='/admin/settings',
    template_folder='templates',
)

from . import routes
