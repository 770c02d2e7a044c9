"""Tests for the local user/chat/message projection."""

import json
from unittest.mock import patch

import pytest

from bot.projection import ProjectionWriter, read_latest_messages
from core.store import DocumentStore, Storage
from conftest import make_message

ADA = {"id": 42, "is_bot": False, "first_name": "Ada", "username": "ada"}
GROUP = {"id": -1001, "type": "supergroup", "title": "Team", "username": "team_chat"}


@pytest.fixture()
def storage(tmp_path):
    return Storage(str(tmp_path / "db"))


@pytest.fixture()
def writer(storage):
    return ProjectionWriter(storage)


class TestStoreUser:
    def test_first_sighting_inserts(self, writer, storage) -> None:
        changed = writer.store_user(ADA)
        assert changed == {"id": 42, "username": "ada", "first_name": "Ada", "last_name": None}
        record = storage.users.find_one_by({"id": 42})
        assert record["username"] == "ada"
        assert "is_bot" not in record

    def test_repeat_sighting_writes_nothing(self, writer, storage) -> None:
        writer.store_user(ADA)
        with patch.object(DocumentStore, "update_by_id") as spy:
            assert writer.store_user(dict(ADA)) == {}
        spy.assert_not_called()
        assert storage.users.count() == 1

    def test_only_changed_fields_written(self, writer, storage) -> None:
        writer.store_user(ADA)
        renamed = dict(ADA, username="lovelace")
        with patch.object(DocumentStore, "update_by_id", autospec=True) as spy:
            assert writer.store_user(renamed) == {"username": "lovelace"}
        spy.assert_called_once()
        _, _, fields = spy.call_args.args
        assert fields == {"username": "lovelace"}

    def test_change_is_persisted(self, writer, storage) -> None:
        writer.store_user(ADA)
        writer.store_user(dict(ADA, last_name="King"))
        record = storage.users.find_one_by({"id": 42})
        assert record["last_name"] == "King"
        assert storage.users.count() == 1


class TestStoreChat:
    def test_keyed_by_telegram_id(self, writer, storage) -> None:
        writer.store_chat(GROUP)
        record = storage.chats.find_by_id(-1001)
        assert record["type"] == "supergroup"
        assert record["title"] == "Team"
        assert json.loads(record["chat_obj"]) == GROUP

    def test_unchanged_chat_not_rewritten(self, writer) -> None:
        writer.store_chat(GROUP)
        with patch.object(DocumentStore, "update_by_id") as spy:
            assert writer.store_chat(dict(GROUP)) == {}
        spy.assert_not_called()

    def test_renamed_chat_updates_title_and_object(self, writer, storage) -> None:
        writer.store_chat(GROUP)
        changed = writer.store_chat(dict(GROUP, title="Core Team"))
        assert set(changed) == {"title", "chat_obj"}
        record = storage.chats.find_by_id(-1001)
        assert record["title"] == "Core Team"
        assert json.loads(record["chat_obj"])["title"] == "Core Team"
        assert storage.chats.count() == 1

    def test_locally_added_keys_survive_update(self, writer, storage) -> None:
        writer.store_chat(GROUP)
        storage.chats.update_by_id(-1001, {"chat_obj": json.dumps(dict(GROUP, description="About us"), sort_keys=True)})

        with patch.object(DocumentStore, "update_by_id") as spy:
            assert writer.store_chat(dict(GROUP)) == {}
        spy.assert_not_called()
        assert json.loads(storage.chats.find_by_id(-1001)["chat_obj"])["description"] == "About us"

    def test_merge_keeps_description_on_rename(self, writer, storage) -> None:
        writer.store_chat(dict(GROUP, description="About us"))
        writer.store_chat(dict(GROUP, title="Core Team"))
        chat_obj = json.loads(storage.chats.find_by_id(-1001)["chat_obj"])
        assert chat_obj["title"] == "Core Team"
        assert chat_obj["description"] == "About us"


class TestStoreMessage:
    def test_record_fields(self, writer, storage) -> None:
        raw = make_message(message_id=7, text="hello")
        writer.store_message(raw, "text")
        (record,) = storage.messages.find_all()
        assert record["message_id"] == 7
        assert record["from"] == 42
        assert record["chat"] == 42
        assert record["type"] == "text"
        assert record["text"] == "hello"
        assert json.loads(record["object"]) == raw

    def test_non_text_has_null_text(self, writer, storage) -> None:
        writer.store_message(make_message(voice={"file_id": "V", "duration": 1}), "voice")
        assert storage.messages.find_all()[0]["text"] is None

    def test_appends_duplicates(self, writer, storage) -> None:
        raw = make_message(text="same")
        writer.store_message(raw, "text")
        writer.store_message(raw, "text")
        assert storage.messages.count() == 2


class TestReadLatestMessages:
    def test_newest_window_in_chronological_order(self, writer, storage) -> None:
        for n, date in enumerate((300, 100, 400, 200), start=1):
            writer.store_message(make_message(message_id=n, date=date, text=str(date)), "text")

        records = read_latest_messages(storage.messages, {"chat": 42}, limit=3)
        assert [record["date"] for record in records] == [200, 300, 400]
        assert records[-1]["object"]["text"] == "400"

    def test_filters_by_chat(self, writer, storage) -> None:
        writer.store_message(make_message(text="private"), "text")
        writer.store_message(make_message(chat=GROUP, text="group"), "text")
        records = read_latest_messages(storage.messages, {"chat": -1001}, limit=10)
        assert [record["text"] for record in records] == ["group"]
