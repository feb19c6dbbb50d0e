"""
Record Store Gateway
====================

Thin typed accessors over the document store (MongoDB) collections the
public website and the dashboard share: contacts, pricingPlans, blogPosts
and settings.

Records come back as plain dicts with an ``id`` string and the store's own
field names. Timestamps are returned timezone-aware (UTC) and written as
naive UTC, which is what MongoDB keeps on disk.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from bson import ObjectId
from flask import current_app
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import ConnectionFailure, ExecutionTimeout, OperationFailure

from .config import Config
from .errors import NotFound, PermissionDenied, Unavailable

logger = logging.getLogger(__name__)

# Server error codes meaning "you are not allowed to do this"
# 13 Unauthorized, 18 AuthenticationFailed, 8000 Atlas AtlasError (unauthorized)
UNAUTHORIZED_CODES = {13, 18, 8000}

OPERATORS = {
    '==': '$eq',
    '!=': '$ne',
    '<': '$lt',
    '<=': '$lte',
    '>': '$gt',
    '>=': '$gte',
    'in': '$in',
}


class _ServerTimestamp:
    """Placeholder replaced with the store clock when a record is written"""

    def __repr__(self):
        return 'SERVER_TIMESTAMP'


SERVER_TIMESTAMP = _ServerTimestamp()


@contextmanager
def translate_errors():
    """Map driver exceptions onto the admin error taxonomy"""
    try:
        yield
    except ExecutionTimeout as e:
        raise Unavailable() from e
    except OperationFailure as e:
        if e.code in UNAUTHORIZED_CODES:
            raise PermissionDenied() from e
        raise
    except ConnectionFailure as e:
        raise Unavailable() from e


def utc_now():
    return datetime.now(timezone.utc)


def _to_store(value):
    """Prepare a value for writing"""
    if value is SERVER_TIMESTAMP:
        return utc_now().replace(tzinfo=None)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dict):
        return {k: _to_store(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_store(v) for v in value]
    return value


def _from_store(value):
    """Normalize a value read from the store"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, dict):
        return {k: _from_store(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_store(v) for v in value]
    return value


def _record_key(record_id):
    """Document ids are ObjectIds unless the caller uses a fixed key like 'global'"""
    if isinstance(record_id, str) and ObjectId.is_valid(record_id):
        return ObjectId(record_id)
    return record_id


def build_filter(where):
    """Translate [(field, op, value), ...] into a MongoDB filter document"""
    query = {}
    for field, op, value in where or []:
        if op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        if op == 'in':
            value = list(value)
        query.setdefault(field, {})[OPERATORS[op]] = _to_store(value)
    return query


def to_record(document):
    if document is None:
        return None
    record = dict(document)
    record['id'] = str(record.pop('_id'))
    return _from_store(record)


class RecordCollection:
    """CRUD accessors for one collection"""

    def __init__(self, collection, entity='record'):
        self.collection = collection
        self.entity = entity

    @property
    def name(self):
        return self.collection.name

    def list(self, where=None, order_by=None, limit=None):
        """Return a snapshot of the matching records.

        Args:
            where: list of (field, op, value) predicates, ANDed together
            order_by: (field, 'asc' | 'desc')
            limit: maximum number of records
        """
        with translate_errors():
            cursor = self.collection.find(build_filter(where))
            if order_by:
                field, direction = order_by
                cursor = cursor.sort(field, DESCENDING if direction == 'desc' else ASCENDING)
            if limit:
                cursor = cursor.limit(limit)
            return [to_record(doc) for doc in cursor]

    def count(self, where=None):
        with translate_errors():
            return self.collection.count_documents(build_filter(where))

    def get(self, record_id):
        with translate_errors():
            document = self.collection.find_one({'_id': _record_key(record_id)})
        if document is None:
            raise NotFound(self.entity)
        return to_record(document)

    def create(self, data):
        """Insert a new record and return its id"""
        document = _to_store({k: v for k, v in data.items() if k != 'id'})
        with translate_errors():
            result = self.collection.insert_one(document)
        return str(result.inserted_id)

    def update(self, record_id, data):
        """Apply a partial update to an existing record"""
        changes = _to_store({k: v for k, v in data.items() if k != 'id'})
        with translate_errors():
            result = self.collection.update_one({'_id': _record_key(record_id)}, {'$set': changes})
        if result.matched_count == 0:
            raise NotFound(self.entity)

    def set(self, record_id, data, merge=True):
        """Write a record under a known id, creating it when missing"""
        document = _to_store({k: v for k, v in data.items() if k != 'id'})
        key = _record_key(record_id)
        with translate_errors():
            if merge:
                self.collection.update_one({'_id': key}, {'$set': document}, upsert=True)
            else:
                self.collection.replace_one({'_id': key}, document, upsert=True)

    def delete(self, record_id):
        with translate_errors():
            result = self.collection.delete_one({'_id': _record_key(record_id)})
        if result.deleted_count == 0:
            raise NotFound(self.entity)


class RecordStore:
    """All collections the dashboard touches, bound to one database"""

    def __init__(self, database):
        self.database = database
        self.contacts = RecordCollection(database[Config.CONTACTS_COLLECTION], 'message')
        self.pricing_plans = RecordCollection(database[Config.PRICING_PLANS_COLLECTION], 'plan')
        self.blog_posts = RecordCollection(database[Config.BLOG_POSTS_COLLECTION], 'post')
        self.settings = RecordCollection(database[Config.SETTINGS_COLLECTION], 'settings')
        self.admins = RecordCollection(database[Config.ADMINS_COLLECTION], 'admin')
        self.logs = RecordCollection(database[Config.LOGS_COLLECTION], 'log entry')

    @classmethod
    def connect(cls, uri, db_name, client=None):
        """Open a store on ``uri``; pass ``client`` to reuse an existing MongoClient"""
        if client is None:
            client = MongoClient(uri, serverSelectionTimeoutMS=5000)
        logger.info(f"Record store bound to database '{db_name}'")
        return cls(client[db_name])


def get_store():
    """Record store registered on the current app"""
    return current_app.extensions['brotech_admin'].store
