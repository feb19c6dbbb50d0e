"""
Blog Admin Module
=================

Admin interface for blog post management.
Plugs into the admin dashboard module.

Provides:
- Post creation and editing with a markdown preview
- Draft/publish workflow
- Feature image upload
"""

from flask import Blueprint

blog_bp = Blueprint(
    'blog',
    __name__,
    url_prefix='/admin/blog',
    template_folder='templates',
)

from . import routes
from .editor import EditorState, PostEditor

__all__ = ['blog_bp', 'EditorState', 'PostEditor']
