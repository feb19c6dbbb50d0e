"""
Error Taxonomy
==============

Errors raised by the record store gateway, blob store and admin services.
Routes catch these at the request boundary and turn them into user-facing
messages; nothing here should crash a view.
"""

# Shown when the database user lacks privileges. Mirrors the roles the
# public website and this dashboard expect.
DATABASE_ROLE_GUIDANCE = """db.createRole({
  role: "brotechAdmin",
  privileges: [
    // contacts: the public site inserts, admins read and delete
    { resource: { db: "brotech", collection: "contacts" },
      actions: ["find", "insert", "remove"] },
    // pricingPlans, blogPosts, settings: admins manage everything
    { resource: { db: "brotech", collection: "pricingPlans" },
      actions: ["find", "insert", "update", "remove"] },
    { resource: { db: "brotech", collection: "blogPosts" },
      actions: ["find", "insert", "update", "remove"] },
    { resource: { db: "brotech", collection: "settings" },
      actions: ["find", "insert", "update"] }
  ],
  roles: []
})"""


class AdminError(Exception):
    """Base class for errors surfaced to admin users"""

    status_code = 500
    user_message = 'An unexpected error occurred. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class ValidationError(AdminError):
    """Input rejected before any network call is made"""

    status_code = 400


class NotFound(AdminError):
    """A requested record does not exist"""

    status_code = 404

    def __init__(self, entity='record', message=None):
        self.entity = entity
        super().__init__(message or f'{entity.capitalize()} not found.')


class PermissionDenied(AdminError):
    """The backend refused the operation for the current credentials.

    Carries corrective guidance so the operator can fix the access policy
    instead of seeing a bare error.
    """

    status_code = 403
    user_message = ('The database rejected this request. The dashboard user '
                    'needs read/write access to the site collections.')

    def __init__(self, message=None, guidance=DATABASE_ROLE_GUIDANCE):
        super().__init__(message)
        self.guidance = guidance


class AuthenticationFailed(AdminError):
    """Credentials did not match an admin account"""

    status_code = 401
    user_message = 'Invalid email or password.'


class Unavailable(AdminError):
    """Transient backend failure (network, timeout, server selection)"""

    status_code = 503
    user_message = 'The database is currently unreachable. Please try again in a moment.'


def describe_error(error):
    """Turn any exception into a dict suitable for templates and JSON responses"""
    if isinstance(error, PermissionDenied):
        return {
            'kind': 'permission',
            'message': error.message,
            'guidance': error.guidance,
        }
    if isinstance(error, AdminError):
        return {'kind': type(error).__name__, 'message': error.message}
    return {'kind': 'unexpected', 'message': f'An unexpected error occurred: {error}'}
