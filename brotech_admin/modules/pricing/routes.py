"""
Pricing Admin Routes
====================
"""

from flask import flash, jsonify, redirect, render_template, request, url_for

from . import pricing_bp
from .plans import build_plan, features_to_text, list_plans, save_plan
from ...core.auth import admin_required, api_admin_required
from ...core.errors import AdminError, ValidationError, describe_error
from ...core.logging_service import LoggingService
from ...core.store import get_store


def _error_response(e):
    if isinstance(e, AdminError):
        return jsonify({'error': describe_error(e)}), e.status_code
    LoggingService.log_error_with_traceback('pricing', e)
    return jsonify({'error': describe_error(e)}), 500


# ===== Page Routes =====

@pricing_bp.route('/')
@admin_required
def pricing_page():
    """Plan list, with the edit form filled in when ?edit=<id> is given"""
    store = get_store()
    try:
        plans = list_plans(store)
    except Exception as e:
        LoggingService.log_error_with_traceback('pricing', e)
        return render_template('pricing/pricing.html', plans=[], editing=None,
                               error=describe_error(e), features_to_text=features_to_text)

    edit_id = request.args.get('edit')
    editing = next((p for p in plans if p['id'] == edit_id), None) if edit_id else None
    return render_template('pricing/pricing.html', plans=plans, editing=editing,
                           error=None, features_to_text=features_to_text)


@pricing_bp.route('/save', methods=['POST'])
@admin_required
def save_plan_form():
    """Create or update a plan from the form"""
    plan_id = request.form.get('plan_id') or None
    try:
        data = build_plan(
            request.form.get('title'),
            request.form.get('price'),
            request.form.get('features'),
            request.form.get('mostPopular'),
        )
        save_plan(get_store(), data, plan_id)
    except ValidationError as e:
        flash(e.message, 'error')
        return redirect(url_for('pricing.pricing_page', edit=plan_id) if plan_id
                        else url_for('pricing.pricing_page'))
    except AdminError as e:
        LoggingService.error('pricing', f'Failed to save plan: {e.message}')
        flash(f'Failed to save the plan. {e.message}', 'error')
        return redirect(url_for('pricing.pricing_page'))

    LoggingService.log_user_action('pricing', f"saved plan '{data['title']}'")
    flash('Plan saved.', 'success')
    return redirect(url_for('pricing.pricing_page'))


@pricing_bp.route('/<plan_id>/delete', methods=['POST'])
@admin_required
def delete_plan(plan_id):
    try:
        get_store().pricing_plans.delete(plan_id)
    except AdminError as e:
        flash(f'Failed to delete the plan. {e.message}', 'error')
        return redirect(url_for('pricing.pricing_page'))

    LoggingService.log_user_action('pricing', f'deleted plan {plan_id}')
    flash('Plan deleted.', 'success')
    return redirect(url_for('pricing.pricing_page'))


# ===== API Routes =====

@pricing_bp.route('/api/plans', methods=['GET'])
@api_admin_required
def api_list():
    try:
        return jsonify({'plans': list_plans(get_store())})
    except Exception as e:
        return _error_response(e)


@pricing_bp.route('/api/plans', methods=['POST'])
@api_admin_required
def api_create():
    data = request.get_json(silent=True) or {}
    try:
        plan = build_plan(data.get('title'), data.get('price'), data.get('features'),
                          data.get('mostPopular', False))
        plan_id = save_plan(get_store(), plan)
    except Exception as e:
        return _error_response(e)
    return jsonify({'success': True, 'id': plan_id}), 201


@pricing_bp.route('/api/plans/<plan_id>', methods=['PUT'])
@api_admin_required
def api_update(plan_id):
    data = request.get_json(silent=True) or {}
    try:
        plan = build_plan(data.get('title'), data.get('price'), data.get('features'),
                          data.get('mostPopular', False))
        save_plan(get_store(), plan, plan_id)
    except Exception as e:
        return _error_response(e)
    return jsonify({'success': True, 'id': plan_id})


@pricing_bp.route('/api/plans/<plan_id>', methods=['DELETE'])
@api_admin_required
def api_delete(plan_id):
    try:
        get_store().pricing_plans.delete(plan_id)
    except Exception as e:
        return _error_response(e)
    return jsonify({'success': True})
