"""
Pricing Module
==============

Admin interface for the pricing plans shown on the public website.
"""

from flask import Blueprint

pricing_bp = Blueprint(
    'pricing',
    __name__,
    url_prefix='/admin/pricing',
    template_folder='templates',
)

from . import routes

__all__ = ['pricing_bp']
