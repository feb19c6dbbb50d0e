"""
Pricing plan form handling.
"""

from ...core.errors import ValidationError


def parse_features(text):
    """One feature per line; blank lines are dropped"""
    return [line for line in (text or '').split('\n') if line.strip() != '']


def features_to_text(features):
    return '\n'.join(features or [])


def _truthy(value):
    if isinstance(value, bool):
        return value
    return str(value or '').lower() in ('1', 'true', 'on', 'yes')


def _text(value):
    """Form or JSON value as stripped text; JSON numbers are accepted"""
    return '' if value is None else str(value).strip()


def build_plan(title, price, features, most_popular=False):
    """Validate form input and return the record to write.

    ``features`` may be the raw textarea text or an already split list.
    """
    title = _text(title)
    price = _text(price)
    if isinstance(features, (list, tuple)):
        features = '\n'.join(str(f) for f in features)
    features = '' if features is None else str(features)

    if not title or not price or not features.strip():
        raise ValidationError('All fields are required.')

    return {
        'title': title,
        'price': price,
        'features': parse_features(features),
        'mostPopular': _truthy(most_popular),
    }


def list_plans(store):
    return store.pricing_plans.list(order_by=('title', 'asc'))


def save_plan(store, data, plan_id=None):
    """Create or update a plan; returns its id"""
    if plan_id:
        store.pricing_plans.update(plan_id, data)
        return plan_id
    return store.pricing_plans.create(data)
