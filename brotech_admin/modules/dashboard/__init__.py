"""
Dashboard Module
================

Admin dashboard interface for BroTech.

Provides core admin functionality:
- Admin authentication (login/logout)
- Dashboard with statistics and the 7-day message chart
- Password and profile management
- Admin user creation

This is the foundation module that other admin features plug into.
"""

from flask import Blueprint

# Blueprint name is 'admin' so every module can redirect to admin.login
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates',
)

from . import routes

__all__ = ['dashboard_bp']
