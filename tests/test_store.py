"""
Record store gateway against mongomock, plus driver error translation.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from pymongo.errors import ExecutionTimeout, OperationFailure, ServerSelectionTimeoutError

from brotech_admin.core.errors import NotFound, PermissionDenied, Unavailable
from brotech_admin.core.store import SERVER_TIMESTAMP, RecordCollection, build_filter

from conftest import days_ago


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

def test_create_and_get_round_trip(store):
    created = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    record_id = store.contacts.create({"name": "Jane", "createdAt": created})

    record = store.contacts.get(record_id)
    assert record["id"] == record_id
    assert record["name"] == "Jane"
    assert record["createdAt"] == created
    assert record["createdAt"].tzinfo is not None


def test_list_with_where_order_and_limit(store, messages):
    recent = store.contacts.list(where=[("createdAt", ">=", days_ago(1))])
    assert {r["name"] for r in recent} == {"Bob", "Carol"}

    newest = store.contacts.list(order_by=("createdAt", "desc"), limit=2)
    assert [r["name"] for r in newest] == ["Carol", "Bob"]

    oldest = store.contacts.list(order_by=("createdAt", "asc"), limit=1)
    assert oldest[0]["name"] == "Acme Corp"


def test_count(store, messages):
    assert store.contacts.count() == 4
    assert store.contacts.count(where=[("createdAt", ">=", days_ago(4)), ("createdAt", "<", days_ago(1))]) == 1


def test_update_is_partial(store):
    plan_id = store.pricing_plans.create({"title": "Starter", "price": "$100", "mostPopular": False})
    store.pricing_plans.update(plan_id, {"mostPopular": True})

    plan = store.pricing_plans.get(plan_id)
    assert plan["title"] == "Starter"
    assert plan["mostPopular"] is True


def test_set_merges_into_fixed_id(store):
    store.settings.set("global", {"contactEmail": "hello@brotech.io"})
    store.settings.set("global", {"impactNumbers": {"happyClients": 3}})

    settings = store.settings.get("global")
    assert settings["id"] == "global"
    assert settings["contactEmail"] == "hello@brotech.io"
    assert settings["impactNumbers"] == {"happyClients": 3}


def test_set_without_merge_replaces(store):
    store.settings.set("global", {"contactEmail": "hello@brotech.io"})
    store.settings.set("global", {"phoneNumber": "123"}, merge=False)
    assert "contactEmail" not in store.settings.get("global")


def test_server_timestamp_is_filled_on_write(store):
    before = datetime.now(timezone.utc).replace(microsecond=0)
    post_id = store.blog_posts.create({"title": "Hello", "createdAt": SERVER_TIMESTAMP})
    post = store.blog_posts.get(post_id)
    assert post["createdAt"] >= before


def test_missing_records_raise_not_found(store):
    with pytest.raises(NotFound) as exc:
        store.blog_posts.get("65f000000000000000000000")
    assert exc.value.message == "Post not found."

    with pytest.raises(NotFound):
        store.contacts.delete("65f000000000000000000000")
    with pytest.raises(NotFound):
        store.pricing_plans.update("65f000000000000000000000", {"title": "x"})


def test_delete(store, messages):
    store.contacts.delete(messages[0])
    assert store.contacts.count() == 3


def test_build_filter_rejects_unknown_operators():
    assert build_filter([("status", "in", ("draft", "published"))]) == {
        "status": {"$in": ["draft", "published"]}
    }
    with pytest.raises(ValueError):
        build_filter([("title", "~=", "x")])


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------

def _failing_collection(error):
    collection = MagicMock()
    collection.find.side_effect = error
    collection.find_one.side_effect = error
    collection.delete_one.side_effect = error
    return RecordCollection(collection, "message")


def test_unauthorized_maps_to_permission_denied():
    records = _failing_collection(OperationFailure("not authorized on brotech", code=13))
    with pytest.raises(PermissionDenied) as exc:
        records.list()
    assert "createRole" in exc.value.guidance
    assert exc.value.status_code == 403


def test_connection_problems_map_to_unavailable():
    records = _failing_collection(ServerSelectionTimeoutError("no servers"))
    with pytest.raises(Unavailable):
        records.get("abc")

    records = _failing_collection(ExecutionTimeout("operation exceeded time limit", code=50))
    with pytest.raises(Unavailable):
        records.delete("abc")


def test_other_operation_failures_propagate():
    records = _failing_collection(OperationFailure("bad query", code=2))
    with pytest.raises(OperationFailure):
        records.list()
