"""
Assistant Routes
================

JSON endpoints used by the message detail view.
"""

from flask import jsonify, request

from . import assistant_bp
from .service import assistant_service
from ...core.auth import api_admin_required
from ...core.errors import AdminError, ValidationError, describe_error
from ...core.logging_service import LoggingService
from ...core.store import get_store


def _message_text():
    """Text to work on: an explicit ``text`` or the body of ``message_id``"""
    data = request.get_json(silent=True) or {}
    text = str(data.get('text') or '').strip()
    if text:
        return text
    message_id = data.get('message_id')
    if not message_id:
        raise ValidationError('Provide either text or message_id.')
    text = str(get_store().contacts.get(message_id).get('message') or '').strip()
    if not text:
        raise ValidationError('This message has no text to work on.')
    return text


def _run(operation):
    try:
        text = _message_text()
        return jsonify({'success': True, 'text': operation(text)})
    except AdminError as e:
        if e.status_code >= 500:
            LoggingService.error('assistant', e.message)
        return jsonify({'success': False, 'error': describe_error(e)}), e.status_code
    except Exception as e:
        LoggingService.log_error_with_traceback('assistant', e)
        return jsonify({'success': False, 'error': describe_error(e)}), 500


@assistant_bp.route('/api/status')
@api_admin_required
def status():
    """Whether the assistant can be used"""
    return jsonify({'configured': assistant_service.is_configured})


@assistant_bp.route('/api/summarize', methods=['POST'])
@api_admin_required
def summarize():
    return _run(assistant_service.summarize)


@assistant_bp.route('/api/draft-reply', methods=['POST'])
@api_admin_required
def draft_reply():
    return _run(assistant_service.draft_reply)
