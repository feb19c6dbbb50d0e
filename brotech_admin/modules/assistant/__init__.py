"""
Assistant Module
================

AI helpers for the messages screen: summarize an inquiry and draft a reply.
Requires GEMINI_API_KEY; without it the endpoints answer 503.
"""

from flask import Blueprint

assistant_bp = Blueprint('assistant', __name__, url_prefix='/admin/assistant')

from . import routes
from .service import AssistantService, AssistantUnavailable, AssistantError, assistant_service

__all__ = ['assistant_bp', 'AssistantService', 'AssistantUnavailable', 'AssistantError', 'assistant_service']
