"""
Admin Authentication
====================

Session-backed authentication provider for dashboard operators. Views get
the signed-in admin from ``current_user()`` and may subscribe to session
changes (sign in, sign out, profile updates).
"""

import logging
from functools import wraps

from flask import current_app, jsonify, redirect, request, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import AuthenticationFailed, ValidationError
from .logging_service import LoggingService
from .store import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _validate_new_password(password, confirm, mismatch_message='Passwords do not match.'):
    if password != confirm:
        raise ValidationError(mismatch_message)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'The new password must be at least {MIN_PASSWORD_LENGTH} characters long.')


class AuthProvider:
    """Authentication capability injected into the admin blueprints.

    The signed-in identity lives in the Flask session under ``admin_id``,
    ``admin_email`` and ``admin_name``. Admin accounts are stored in the
    ``admins`` collection with salted password hashes.
    """

    def __init__(self, store=None):
        self.store = store
        self._subscribers = []

    def init_app(self, store):
        self.store = store

    # ----- identity -----

    def current_user(self):
        """Return the signed-in admin as a dict, or None"""
        if 'admin_id' not in session:
            return None
        return {
            'id': session['admin_id'],
            'email': session.get('admin_email'),
            'displayName': session.get('admin_name') or '',
        }

    def subscribe(self, callback):
        """Call ``callback(user_or_none)`` on every session change.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _notify(self):
        user = self.current_user()
        for callback in list(self._subscribers):
            callback(user)

    # ----- session -----

    def sign_in(self, email, password):
        email = (email or '').strip().lower()
        if not email or not password:
            raise ValidationError('Please enter both email and password.')

        matches = self.store.admins.list(where=[('email', '==', email)], limit=1)
        admin = matches[0] if matches else None
        if not admin or not check_password_hash(admin.get('passwordHash', ''), password):
            LoggingService.log_security_event('Failed admin login', {'email': email})
            raise AuthenticationFailed()

        session['admin_id'] = admin['id']
        session['admin_email'] = admin['email']
        session['admin_name'] = admin.get('displayName') or ''
        LoggingService.log_user_action('auth', 'login', user_id=admin['email'])
        self._notify()
        return self.current_user()

    def sign_out(self):
        admin_email = session.get('admin_email', 'Unknown')
        session.pop('admin_id', None)
        session.pop('admin_email', None)
        session.pop('admin_name', None)
        logger.info(f"Admin signed out: {admin_email}")
        self._notify()

    # ----- account management -----

    def admin_count(self):
        return self.store.admins.count()

    def create_admin(self, email, password, confirm_password, display_name=''):
        """Create a new admin account and return its id"""
        email = (email or '').strip().lower()
        if not all([email, password, confirm_password]):
            raise ValidationError('All fields are required.')
        _validate_new_password(password, confirm_password)

        if self.store.admins.count(where=[('email', '==', email)]):
            raise ValidationError('An admin with this email already exists.')

        admin_id = self.store.admins.create({
            'email': email,
            'passwordHash': generate_password_hash(password),
            'displayName': display_name,
            'createdAt': SERVER_TIMESTAMP,
        })
        LoggingService.log_user_action('auth', f'created admin {email}')
        return admin_id

    def change_password(self, current_password, new_password, confirm_password):
        if not all([current_password, new_password, confirm_password]):
            raise ValidationError('All fields are required.')
        _validate_new_password(new_password, confirm_password, 'New passwords do not match.')

        user = self.current_user()
        if user is None:
            raise ValidationError('Could not find user information.')

        admin = self.store.admins.get(user['id'])
        if not check_password_hash(admin.get('passwordHash', ''), current_password):
            raise AuthenticationFailed('The current password you entered is incorrect.')

        self.store.admins.update(user['id'], {'passwordHash': generate_password_hash(new_password)})
        LoggingService.log_user_action('auth', 'changed password')

    def update_profile(self, display_name):
        user = self.current_user()
        if user is None:
            raise ValidationError('No user is logged in.')

        display_name = (display_name or '').strip()
        self.store.admins.update(user['id'], {'displayName': display_name})
        session['admin_name'] = display_name
        self._notify()


def get_auth():
    """Authentication provider registered on the current app"""
    return current_app.extensions['brotech_admin'].auth


def admin_required(f):
    """Decorator to require admin login for page views"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return redirect(url_for('admin.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def api_admin_required(f):
    """Decorator to require admin login for JSON endpoints"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function
