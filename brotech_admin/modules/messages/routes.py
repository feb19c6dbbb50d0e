"""
Messages Admin Routes
=====================

Every view fetches one snapshot of the contacts collection and runs the
list pipeline over it.
"""

from flask import Response, flash, jsonify, redirect, render_template, request, url_for

from . import messages_bp
from .export import export_filename, messages_to_csv
from .pipeline import DEFAULT_SORT, MessageListState, run_pipeline
from ...core.auth import admin_required, api_admin_required, get_auth
from ...core.errors import AdminError, describe_error
from ...core.logging_service import LoggingService
from ...core.store import get_store


def _list_args():
    return (
        request.args.get('search', '').strip(),
        request.args.get('sort', DEFAULT_SORT),
        request.args.get('page', 1),
    )


def _serialize(msg):
    data = dict(msg)
    if data.get('createdAt'):
        data['createdAt'] = data['createdAt'].isoformat()
    return data


def _error_response(e):
    if isinstance(e, AdminError):
        return jsonify({'error': describe_error(e)}), e.status_code
    LoggingService.log_error_with_traceback('messages', e)
    return jsonify({'error': describe_error(e)}), 500


# ===== Page Routes =====

@messages_bp.route('/')
@admin_required
def messages_page():
    """Message list with search, sort and pagination"""
    query, order, page = _list_args()
    try:
        messages = get_store().contacts.list()
    except Exception as e:
        LoggingService.log_error_with_traceback('messages', e)
        return render_template('messages/messages.html', error=describe_error(e),
                               query=query, order=order, result=None)

    state = MessageListState(messages, query=query, order=order, page=page)
    return render_template('messages/messages.html', error=None, result=state.result(),
                           query=state.query, order=state.order)


@messages_bp.route('/<message_id>')
@admin_required
def message_detail(message_id):
    """Single message with the assistant panel"""
    try:
        message = get_store().contacts.get(message_id)
    except AdminError as e:
        flash(e.message, 'error')
        return redirect(url_for('messages.messages_page'))
    return render_template('messages/message_detail.html', message=message)


@messages_bp.route('/<message_id>/delete', methods=['POST'])
@admin_required
def delete_message(message_id):
    """Delete a message, then return to the same list view"""
    query = request.form.get('search', '').strip()
    order = request.form.get('sort', DEFAULT_SORT)
    page = request.form.get('page', 1)
    store = get_store()

    try:
        state = MessageListState(store.contacts.list(), query=query, order=order, page=page)
        store.contacts.delete(message_id)
    except AdminError as e:
        LoggingService.error('messages', f'Failed to delete message {message_id}: {e.message}')
        flash(f'Failed to delete message. {e.message}', 'error')
        return redirect(url_for('messages.messages_page', search=query, sort=order, page=page))

    # Only drop it locally once the store confirmed
    state.remove(message_id)
    LoggingService.log_user_action('messages', f'deleted message {message_id}',
                                   user_id=get_auth().current_user()['email'])
    flash('Message deleted.', 'success')
    return redirect(url_for('messages.messages_page', search=state.query, sort=state.order, page=state.page))


@messages_bp.route('/export')
@admin_required
def export_csv():
    """Download the filtered and sorted list (all pages) as CSV"""
    query, order, _ = _list_args()
    try:
        messages = get_store().contacts.list()
    except AdminError as e:
        flash(f'Export failed. {e.message}', 'error')
        return redirect(url_for('messages.messages_page', search=query, sort=order))

    result = run_pipeline(messages, query, order)
    return Response(
        messages_to_csv(result['sorted']),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={export_filename()}'},
    )


# ===== API Routes =====

@messages_bp.route('/api/messages')
@api_admin_required
def api_list():
    query, order, page = _list_args()
    try:
        messages = get_store().contacts.list()
    except Exception as e:
        return _error_response(e)

    result = run_pipeline(messages, query, order, page)
    return jsonify({
        'messages': [_serialize(m) for m in result['items']],
        'page': result['page'],
        'total_pages': result['total_pages'],
        'total': result['total'],
        'query': result['query'],
        'order': result['order'],
    })


@messages_bp.route('/api/messages/<message_id>', methods=['GET'])
@api_admin_required
def api_get(message_id):
    try:
        return jsonify(_serialize(get_store().contacts.get(message_id)))
    except Exception as e:
        return _error_response(e)


@messages_bp.route('/api/messages/<message_id>', methods=['DELETE'])
@api_admin_required
def api_delete(message_id):
    try:
        get_store().contacts.delete(message_id)
    except Exception as e:
        return _error_response(e)

    LoggingService.log_user_action('messages', f'deleted message {message_id}',
                                   user_id=get_auth().current_user()['email'])
    return jsonify({'success': True})
