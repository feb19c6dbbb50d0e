"""
Centralized logging service for the BroTech admin dashboard.
Provides structured logging with document store persistence and console fallback.
"""

import json
import logging
import traceback

from flask import current_app, has_app_context, has_request_context, request, session

from .store import utc_now

console = logging.getLogger('brotech_admin')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _get_store():
        if not has_app_context():
            return None
        extension = current_app.extensions.get('brotech_admin')
        return extension.store if extension else None

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = request.headers.get('User-Agent', '')
        return ip_address, user_agent, request.path, session.get('admin_email')

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the store and the console

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (dashboard, messages, blog, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the signed-in admin
        """
        level = level.upper()
        console.log(getattr(logging, level, logging.INFO), f"[{source}] {message}")

        ip_address, user_agent, request_path, admin_email = LoggingService._get_request_context()

        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        store = LoggingService._get_store()
        if store is None:
            return

        try:
            store.logs.create({
                'timestamp': utc_now(),
                'level': level,
                'source': source,
                'message': message,
                'details': details,
                'ipAddress': ip_address,
                'userAgent': user_agent,
                'requestPath': request_path,
                'userId': user_id or admin_email,
            })
        except Exception as e:
            # Fallback to console logging if the store write fails
            console.warning(f"Logging service error: {e}")
            if details:
                console.warning(f"Details: {details}")

    @staticmethod
    def info(source, message, details=None, user_id=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log operator actions (login, delete, publish, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None):
        """Log security-related events"""
        LoggingService.warning('security', message, details)

