"""
Settings Admin Routes
=====================

Admin interface for managing site settings.
"""

from flask import flash, jsonify, redirect, render_template, request, url_for

from . import settings_bp
from .helpers import (
    IMPACT_FIELDS, SETTINGS_FIELDS, get_impact_numbers, get_site_settings,
    save_impact_numbers, save_site_settings
)
from ...core.auth import admin_required, api_admin_required
from ...core.errors import AdminError, PermissionDenied, describe_error
from ...core.logging_service import LoggingService
from ...core.store import get_store


@settings_bp.route('/')
@admin_required
def settings_page():
    """Main settings page"""
    store = get_store()
    try:
        current_values = get_site_settings(store)
        impact_numbers = get_impact_numbers(store)
    except Exception as e:
        LoggingService.log_error_with_traceback('settings', e)
        error = describe_error(e)
        if not isinstance(e, PermissionDenied):
            error['message'] = 'Failed to load site settings. Please check your connection and try again.'
        return render_template('settings/settings.html', schema=SETTINGS_FIELDS, impact_fields=IMPACT_FIELDS,
                               current_values={}, impact_numbers={}, error=error)

    return render_template('settings/settings.html',
                           schema=SETTINGS_FIELDS,
                           impact_fields=IMPACT_FIELDS,
                           current_values=current_values,
                           impact_numbers=impact_numbers,
                           error=None)


@settings_bp.route('/save', methods=['POST'])
@admin_required
def save_settings():
    """Save contact and social settings from form"""
    try:
        save_site_settings(get_store(), request.form.to_dict())
        LoggingService.log_user_action('settings', 'updated site settings')
        flash('Settings saved successfully!', 'success')
    except AdminError as e:
        LoggingService.error('settings', f'Failed to save settings: {e.message}')
        if isinstance(e, PermissionDenied):
            flash(f'You do not have permission to save settings. {e.message}', 'error')
        else:
            flash('Failed to save settings. Please try again.', 'error')

    return redirect(url_for('settings.settings_page'))


@settings_bp.route('/impact', methods=['POST'])
@admin_required
def save_impact():
    """Save the impact numbers shown on the public site"""
    try:
        save_impact_numbers(get_store(), request.form.to_dict())
        LoggingService.log_user_action('settings', 'updated impact numbers')
        flash('Impact numbers updated successfully!', 'success')
    except AdminError as e:
        LoggingService.error('settings', f'Failed to save impact numbers: {e.message}')
        flash('Failed to save numbers. Please check your permissions and try again.', 'error')

    return redirect(url_for('settings.settings_page'))


# ===== API Routes =====

@settings_bp.route('/api/settings', methods=['GET'])
@api_admin_required
def api_get_settings():
    try:
        return jsonify(get_site_settings(get_store()))
    except AdminError as e:
        return jsonify({'error': describe_error(e)}), e.status_code


@settings_bp.route('/api/settings', methods=['POST'])
@api_admin_required
def api_save_settings():
    data = request.get_json(silent=True) or {}
    store = get_store()
    try:
        saved = save_site_settings(store, data)
        if 'impactNumbers' in data:
            saved['impactNumbers'] = save_impact_numbers(store, data['impactNumbers'] or {})
    except AdminError as e:
        return jsonify({'error': describe_error(e)}), e.status_code

    return jsonify({'success': True, 'settings': saved})
