import os
from dotenv import load_dotenv

load_dotenv(override=True)


class Config:
    """
    Base configuration for the BroTech admin dashboard.
    Deployments provide backend credentials via environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    BRAND_NAME = os.getenv('BRAND_NAME', 'BroTech')

    # Document store (MongoDB)
    MONGO_URI = os.getenv('MONGO_URI', 'mongodb://localhost:27017')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'brotech')

    # Collection names - shared with the public website, do not rename
    CONTACTS_COLLECTION = 'contacts'
    PRICING_PLANS_COLLECTION = 'pricingPlans'
    BLOG_POSTS_COLLECTION = 'blogPosts'
    SETTINGS_COLLECTION = 'settings'
    ADMINS_COLLECTION = 'admins'
    LOGS_COLLECTION = 'appLogs'

    # Day boundaries for the dashboard chart; empty means the server's local zone
    SITE_TIMEZONE = os.getenv('SITE_TIMEZONE', '')

    # Threads used for dashboard fan-out queries
    FANOUT_MAX_WORKERS = int(os.getenv('FANOUT_MAX_WORKERS', '8'))

    # Blob storage: 'local' (static folder) or 'cloud' (S3-compatible Spaces)
    STORAGE_TYPE = os.getenv('STORAGE_TYPE', 'local')
    SPACES_REGION = os.getenv('SPACES_REGION')
    SPACES_NAME = os.getenv('SPACES_NAME')
    SPACES_KEY = os.getenv('SPACES_KEY')
    SPACES_SECRET = os.getenv('SPACES_SECRET')
    SPACES_FOLDER = os.getenv('SPACES_FOLDER', 'uploads')

    # Generative text (Gemini)
    GEMINI_API_KEY = os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY')
    GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None and val != '':
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None and val != '':
        return val
    return os.getenv(key, default)
