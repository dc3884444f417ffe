import json

import pytest
from pydantic import ValidationError

from conftest import USER_ID, days_ago, make_record
from speedtrainer.core.session_store import JsonSessionRecordStore
from speedtrainer.utils.error_handlers import PersistenceError


@pytest.fixture(params=["memory", "json"])
def store(request, record_store, json_record_store):
    return record_store if request.param == "memory" else json_record_store


def test_append_is_visible_immediately(store):
    record = make_record(days_ago(0))
    store.append(record)

    assert store.list_by_user(USER_ID) == [record]


def test_records_come_newest_first(store):
    old = make_record(days_ago(5))
    new = make_record(days_ago(0))
    middle = make_record(days_ago(2))
    for record in (old, new, middle):
        store.append(record)

    assert [r.id for r in store.list_by_user(USER_ID)] == [new.id, middle.id, old.id]
    assert [r.id for r in store.list_by_user(USER_ID, limit=2)] == [new.id, middle.id]


def test_delete_all_for_user(store):
    store.append(make_record(days_ago(1)))
    store.append(make_record(days_ago(0)))
    store.append(make_record(days_ago(0), user_id="other"))

    assert store.delete_all_for_user(USER_ID) == 2
    assert store.list_by_user(USER_ID) == []
    assert len(store.list_by_user("other")) == 1


def test_json_store_survives_restart(tmp_path):
    record = make_record(days_ago(0), comprehension_score=0.8, text_id="t1")
    JsonSessionRecordStore(tmp_path).append(record)

    restored = JsonSessionRecordStore(tmp_path).list_by_user(USER_ID)

    assert restored == [record]
    assert (tmp_path / "users" / USER_ID / "sessions.json").exists()


def test_json_store_reports_corrupt_file(tmp_path):
    sessions_file = tmp_path / "users" / USER_ID / "sessions.json"
    sessions_file.parent.mkdir(parents=True)
    sessions_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonSessionRecordStore(tmp_path).list_by_user(USER_ID)


def test_json_store_reports_invalid_record(tmp_path):
    sessions_file = tmp_path / "users" / USER_ID / "sessions.json"
    sessions_file.parent.mkdir(parents=True)
    sessions_file.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonSessionRecordStore(tmp_path).list_by_user(USER_ID)


def test_records_are_immutable():
    record = make_record(days_ago(0))

    with pytest.raises(ValidationError):
        record.wpm = 999
