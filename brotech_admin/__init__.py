"""
BroTech Admin - Admin Dashboard for the BroTech Website
=======================================================

A Flask admin dashboard over the document store the public website writes
to: contact messages, pricing plans, blog posts and site settings.

Usage:
    from flask import Flask
    from brotech_admin import BrotechAdmin

    app = Flask(__name__)
    BrotechAdmin(app)

Every module is registered under /admin. Pass a config dict to switch
features off or to reuse an existing MongoClient:

    BrotechAdmin(app, {'features': {'assistant': False}}, client=mongo_client)
"""

import logging

from .core.auth import AuthProvider
from .core.config import Config
from .core.store import RecordStore

__version__ = '0.1.0'

logger = logging.getLogger(__name__)

DEFAULT_FEATURES = {
    'dashboard': True,
    'messages': True,
    'pricing': True,
    'blog': True,
    'settings': True,
    'assistant': True,
}

# app.config keys seeded from Config when the host app leaves them unset
CONFIG_DEFAULTS = (
    'BRAND_NAME', 'MONGO_URI', 'MONGO_DB_NAME', 'SITE_TIMEZONE', 'FANOUT_MAX_WORKERS',
    'STORAGE_TYPE', 'SPACES_REGION', 'SPACES_NAME', 'SPACES_KEY', 'SPACES_SECRET',
    'SPACES_FOLDER', 'GEMINI_API_KEY', 'GEMINI_MODEL',
)


class BrotechAdmin:
    """Flask extension that wires the store, auth and admin blueprints into an app"""

    def __init__(self, app=None, config=None, client=None):
        self._config = {'features': dict(DEFAULT_FEATURES)}
        self._client = client
        self._registered = []
        self.store = None
        self.auth = AuthProvider()

        if config:
            features = config.get('features') or {}
            self._config['features'].update(features)
            self._config.update({k: v for k, v in config.items() if k != 'features'})

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in CONFIG_DEFAULTS:
            app.config.setdefault(key, getattr(Config, key))
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        if self._config.get('brand_name'):
            app.config['BRAND_NAME'] = self._config['brand_name']

        self.store = RecordStore.connect(app.config['MONGO_URI'], app.config['MONGO_DB_NAME'],
                                         client=self._client)
        self.auth.init_app(self.store)

        app.extensions['brotech_admin'] = self
        self._register_modules(app)
        self._setup_context_processor(app)

    def _register_modules(self, app):
        features = self._config['features']

        if features.get('dashboard'):
            from .modules.dashboard import dashboard_bp
            app.register_blueprint(dashboard_bp)
            self._registered.append('dashboard')

        if features.get('messages'):
            from .modules.messages import messages_bp
            app.register_blueprint(messages_bp)
            self._registered.append('messages')

        if features.get('pricing'):
            from .modules.pricing import pricing_bp
            app.register_blueprint(pricing_bp)
            self._registered.append('pricing')

        if features.get('blog'):
            from .modules.blog import blog_bp
            app.register_blueprint(blog_bp)
            self._registered.append('blog')

        if features.get('settings'):
            from .modules.settings import settings_bp
            app.register_blueprint(settings_bp)
            self._registered.append('settings')

        if features.get('assistant'):
            from .modules.assistant import assistant_bp
            app.register_blueprint(assistant_bp)
            self._registered.append('assistant')

        logger.info(f"BroTech admin modules registered: {', '.join(self._registered)}")

    def _setup_context_processor(self, app):
        @app.context_processor
        def inject_admin_context():
            return {
                'admin_config': self._config,
                'brand_name': app.config.get('BRAND_NAME') or 'BroTech',
                'current_user': self.auth.current_user(),
            }

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['BrotechAdmin', 'Config', '__version__']
