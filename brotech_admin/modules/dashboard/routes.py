"""
Admin Dashboard Routes
======================

Authentication and the dashboard overview for admin users.
"""

from datetime import datetime

from flask import flash, jsonify, redirect, render_template, request, url_for

from . import dashboard_bp
from .aggregation import chart_geometry, load_dashboard
from ...core.auth import admin_required, api_admin_required, get_auth
from ...core.errors import AdminError, describe_error
from ...core.logging_service import LoggingService
from ...core.store import get_store


def _safe_next(target):
    """Only follow redirects that stay on this site"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Admin login route"""
    auth = get_auth()
    if auth.current_user():
        return redirect(url_for('admin.dashboard'))

    if request.method == 'POST':
        try:
            auth.sign_in(request.form.get('email', ''), request.form.get('password', ''))
            flash('Login successful', 'success')
            return redirect(_safe_next(request.args.get('next')) or url_for('admin.dashboard'))
        except AdminError as e:
            flash(e.message, 'error')

    try:
        needs_setup = auth.admin_count() == 0
    except AdminError:
        needs_setup = False
    return render_template('dashboard/login.html', needs_setup=needs_setup)


@dashboard_bp.route('/logout')
def logout():
    """Admin logout route"""
    get_auth().sign_out()
    flash('You have been logged out', 'info')
    return redirect(url_for('admin.login'))


@dashboard_bp.route('/')
@dashboard_bp.route('/dashboard')
@admin_required
def dashboard():
    """Admin dashboard with statistics, chart and recent messages"""
    try:
        data = load_dashboard(get_store())
    except Exception as e:
        LoggingService.log_error_with_traceback('dashboard', e)
        return render_template('dashboard/dashboard.html', error=describe_error(e))

    return render_template(
        'dashboard/dashboard.html',
        stats=data['stats'],
        recent_messages=data['recentMessages'],
        chart=chart_geometry(data['chart']),
        error=None,
    )


@dashboard_bp.route('/api/stats')
@api_admin_required
def api_stats():
    """Dashboard statistics as JSON"""
    try:
        data = load_dashboard(get_store())
    except AdminError as e:
        return jsonify({'error': describe_error(e)}), e.status_code
    except Exception as e:
        LoggingService.log_error_with_traceback('dashboard', e)
        return jsonify({'error': describe_error(e)}), 500

    return jsonify({
        'stats': data['stats'],
        'chart': data['chart'],
        'recentMessages': [
            {**msg, 'createdAt': msg['createdAt'].isoformat() if msg.get('createdAt') else None}
            for msg in data['recentMessages']
        ],
    })


@dashboard_bp.route('/change-password', methods=['GET', 'POST'])
@admin_required
def change_password():
    """Change admin password"""
    if request.method == 'POST':
        try:
            get_auth().change_password(
                request.form.get('current_password', ''),
                request.form.get('new_password', ''),
                request.form.get('confirm_password', ''),
            )
            flash('Password changed successfully', 'success')
            return redirect(url_for('admin.dashboard'))
        except AdminError as e:
            flash(e.message, 'error')

    return render_template('dashboard/change_password.html')


@dashboard_bp.route('/profile', methods=['GET', 'POST'])
@admin_required
def profile():
    """Update the signed-in admin's display name"""
    if request.method == 'POST':
        try:
            get_auth().update_profile(request.form.get('display_name', ''))
            flash('Profile updated successfully!', 'success')
            return redirect(url_for('admin.profile'))
        except AdminError as e:
            flash(e.message, 'error')

    return render_template('dashboard/profile.html')


@dashboard_bp.route('/create-admin', methods=['GET', 'POST'])
def create_admin():
    """Create new admin (only accessible by existing admin or if no admins exist)"""
    auth = get_auth()
    if auth.admin_count() > 0 and not auth.current_user():
        return redirect(url_for('admin.login'))

    if request.method == 'POST':
        email = request.form.get('email', '')
        try:
            auth.create_admin(
                email,
                request.form.get('password', ''),
                request.form.get('confirm_password', ''),
                request.form.get('display_name', '').strip(),
            )
            flash(f'Admin {email.strip().lower()} created successfully', 'success')
            if auth.current_user():
                return redirect(url_for('admin.dashboard'))
            return redirect(url_for('admin.login'))
        except AdminError as e:
            flash(e.message, 'error')

    return render_template('dashboard/create_admin.html')


@dashboard_bp.route('/status')
def status():
    """Check admin login status (API endpoint)"""
    user = get_auth().current_user()
    if user:
        return jsonify({'logged_in': True, 'admin_email': user['email']})
    return jsonify({'logged_in': False}), 401


@dashboard_bp.route('/search')
@admin_required
def search():
    """Global header search lands on the filtered messages list"""
    return redirect(url_for('messages.messages_page', search=request.args.get('q', '').strip()))


@dashboard_bp.route('/<path:path>')
@admin_required
def fallback(path):
    """Unknown admin paths go back to the dashboard"""
    return redirect(url_for('admin.dashboard'))


@dashboard_bp.app_context_processor
def utility_processor():
    """Add utility functions to template context"""
    def endpoint_exists(endpoint):
        try:
            url_for(endpoint)
            return True
        except Exception:
            return False

    def current_year():
        return datetime.now().year

    return dict(endpoint_exists=endpoint_exists, current_year=current_year)
