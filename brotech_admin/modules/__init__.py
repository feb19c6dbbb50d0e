"""
BroTech Admin Modules
=====================

Flask blueprint modules that make up the admin dashboard.
"""

__all__ = ['assistant', 'blog', 'dashboard', 'messages', 'pricing', 'settings']
