"""
Settings Helpers
================

Read and write the ``settings/global`` singleton. Writes are merged into the
existing record so the contact form and the impact numbers form never
overwrite each other.
"""

from ...core.errors import NotFound

SETTINGS_ID = 'global'

# ============================================
# Schema
# ============================================

SETTINGS_FIELDS = {
    'contact': {
        'name': 'Contact Information',
        'fields': [
            ('contactEmail', 'Contact Email', 'email'),
            ('phoneNumber', 'Phone Number', 'text'),
            ('address', 'Address', 'text'),
        ],
    },
    'social': {
        'name': 'Social Media Links',
        'fields': [
            ('twitterUrl', 'Twitter URL', 'url'),
            ('linkedinUrl', 'LinkedIn URL', 'url'),
            ('facebookUrl', 'Facebook URL', 'url'),
            ('instagramUrl', 'Instagram URL', 'url'),
            ('githubUrl', 'GitHub URL', 'url'),
        ],
    },
}

IMPACT_FIELDS = [
    ('projectsCompleted', 'Projects Completed'),
    ('happyClients', 'Happy Clients'),
    ('yearsOfExperience', 'Years of Experience'),
]


def setting_keys():
    return [key for group in SETTINGS_FIELDS.values() for key, _, _ in group['fields']]


# ============================================
# Site Settings
# ============================================

def get_site_settings(store):
    """Current settings, or an empty dict when nothing was saved yet"""
    try:
        settings = store.settings.get(SETTINGS_ID)
    except NotFound:
        return {}
    settings.pop('id', None)
    return settings


def save_site_settings(store, values):
    """Merge the known contact/social fields into the singleton.

    Missing keys are left alone; an empty string or None clears a field.
    """
    data = {
        key: '' if values[key] is None else str(values[key]).strip()
        for key in setting_keys() if key in values
    }
    store.settings.set(SETTINGS_ID, data, merge=True)
    return data


# ============================================
# Impact Numbers
# ============================================

def clamp_impact_number(value):
    """Non-negative integer; anything unparseable becomes 0"""
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, number)


def get_impact_numbers(store):
    numbers = get_site_settings(store).get('impactNumbers') or {}
    return {key: clamp_impact_number(numbers.get(key, 0)) for key, _ in IMPACT_FIELDS}


def save_impact_numbers(store, values):
    numbers = {key: clamp_impact_number(values.get(key, 0)) for key, _ in IMPACT_FIELDS}
    store.settings.set(SETTINGS_ID, {'impactNumbers': numbers}, merge=True)
    return numbers
