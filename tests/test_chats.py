import pytest
from sqlalchemy import func, select

from campus_market.core.errors import Forbidden
from campus_market.models.chat import Chat
from campus_market.models.user import User
from campus_market.services.chats import ChatService, counterpart
from campus_market.services.notifications import NotificationService
from conftest import create_listing


def start_chat(client, headers, listing_id, message):
    return client.post("/api/chats", json={"listing_id": listing_id, "message": message}, headers=headers)


def chats_of(client, user):
    r = client.get("/api/chats", headers=user["headers"])
    assert r.status_code == 200
    return r.json()


def test_counterpart():
    chat = Chat(buyer_id=1, seller_id=2, listing_id=3)
    assert counterpart(chat, 1) == 2
    assert counterpart(chat, 2) == 1
    with pytest.raises(Forbidden):
        counterpart(chat, 3)


def test_first_contact_scenario(client, alice, bob):
    listing = create_listing(client, alice["headers"], price=50)

    r = start_chat(client, bob["headers"], listing["id"], "is this available?")
    assert r.status_code == 201
    body = r.json()
    assert body["chat_id"] == 1
    assert body["message"]["content"] == "is this available?"
    assert body["message"]["sender_id"] == bob["user"]["id"]
    assert body["message"]["is_read"] is False

    chats = chats_of(client, alice)
    assert len(chats) == 1
    assert chats[0]["unread_count"] == 1
    assert chats[0]["other_user"]["id"] == bob["user"]["id"]
    assert chats[0]["last_message"]["content"] == "is this available?"
    assert chats[0]["listing"]["id"] == listing["id"]

    r = client.get("/api/chats/1/messages", headers=alice["headers"])
    assert r.status_code == 200

    assert chats_of(client, alice)[0]["unread_count"] == 0


def test_create_or_append_reuses_chat(client, alice, bob):
    listing = create_listing(client, alice["headers"])
    first = start_chat(client, bob["headers"], listing["id"], "hi")
    second = start_chat(client, bob["headers"], listing["id"], "still there?")
    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["chat_id"] == second.json()["chat_id"]

    chats = chats_of(client, bob)
    assert len(chats) == 1
    assert chats[0]["last_message"]["content"] == "still there?"
    assert chats[0]["other_user"]["id"] == alice["user"]["id"]

    msgs = client.get(f"/api/chats/{first.json()['chat_id']}/messages", headers=bob["headers"]).json()
    assert [m["content"] for m in msgs] == ["hi", "still there?"]


def test_cannot_message_own_listing(client, alice):
    listing = create_listing(client, alice["headers"])
    r = start_chat(client, alice["headers"], listing["id"], "hello me")
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot message your own listing"


def test_unknown_listing_is_invalid_input(client, bob):
    r = start_chat(client, bob["headers"], 999, "anyone?")
    assert r.status_code == 400


def test_chat_routes_require_auth(client):
    assert client.get("/api/chats").status_code == 401
    assert client.post("/api/chats", json={"listing_id": 1, "message": "x"}).status_code == 401


def test_read_on_view_marks_only_counterpart_messages(client, alice, bob):
    listing = create_listing(client, alice["headers"])
    chat_id = start_chat(client, bob["headers"], listing["id"], "hi").json()["chat_id"]
    start_chat(client, bob["headers"], listing["id"], "hello?")
    r = client.post(f"/api/chats/{chat_id}/messages", json={"content": "yes, available"}, headers=alice["headers"])
    assert r.status_code == 201

    msgs = client.get(f"/api/chats/{chat_id}/messages", headers=alice["headers"]).json()
    assert [m["content"] for m in msgs] == ["hi", "hello?", "yes, available"]
    by_bob = [m for m in msgs if m["sender_id"] == bob["user"]["id"]]
    by_alice = [m for m in msgs if m["sender_id"] == alice["user"]["id"]]
    assert all(m["is_read"] and m["read_at"] for m in by_bob)
    assert all(not m["is_read"] and m["read_at"] is None for m in by_alice)

    # bob still has alice's reply unread until he looks
    assert chats_of(client, bob)[0]["unread_count"] == 1
    client.get(f"/api/chats/{chat_id}/messages", headers=bob["headers"])
    assert chats_of(client, bob)[0]["unread_count"] == 0


def test_non_participant_forbidden(client, alice, bob, carol):
    listing = create_listing(client, alice["headers"])
    chat_id = start_chat(client, bob["headers"], listing["id"], "hi").json()["chat_id"]

    assert client.get(f"/api/chats/{chat_id}", headers=carol["headers"]).status_code == 403
    assert client.get(f"/api/chats/{chat_id}/messages", headers=carol["headers"]).status_code == 403
    r = client.post(f"/api/chats/{chat_id}/messages", json={"content": "me too"}, headers=carol["headers"])
    assert r.status_code == 403
    assert chats_of(client, carol) == []


def test_missing_chat_404(client, alice):
    assert client.get("/api/chats/77", headers=alice["headers"]).status_code == 404
    assert client.get("/api/chats/77/messages", headers=alice["headers"]).status_code == 404


def test_get_chat_detail(client, alice, bob):
    listing = create_listing(client, alice["headers"])
    chat_id = start_chat(client, bob["headers"], listing["id"], "hi").json()["chat_id"]
    body = client.get(f"/api/chats/{chat_id}", headers=bob["headers"]).json()
    assert body["buyer_id"] == bob["user"]["id"]
    assert body["seller_id"] == alice["user"]["id"]
    assert body["other_user"]["id"] == alice["user"]["id"]
    # bob's own message does not count as unread for him
    assert body["unread_count"] == 0


def test_chats_ordered_by_latest_activity(client, alice, bob, carol):
    l1 = create_listing(client, alice["headers"], title="First")
    l2 = create_listing(client, alice["headers"], title="Second")
    c1 = start_chat(client, bob["headers"], l1["id"], "about first").json()["chat_id"]
    c2 = start_chat(client, carol["headers"], l2["id"], "about second").json()["chat_id"]

    assert [c["id"] for c in chats_of(client, alice)] == [c2, c1]

    client.post(f"/api/chats/{c1}/messages", json={"content": "bump"}, headers=alice["headers"])
    assert [c["id"] for c in chats_of(client, alice)] == [c1, c2]


def test_messages_notify_the_other_participant(client, alice, bob):
    listing = create_listing(client, alice["headers"], title="Bike")
    chat_id = start_chat(client, bob["headers"], listing["id"], "hi").json()["chat_id"]
    start_chat(client, bob["headers"], listing["id"], "again")

    seller_notes = client.get("/api/notifications", headers=alice["headers"]).json()
    assert len(seller_notes) == 2
    assert all(n["type"] == "new_message" for n in seller_notes)
    assert seller_notes[0]["link"] == f"/chat/{chat_id}"
    assert "Bike" in seller_notes[0]["message"]

    client.post(f"/api/chats/{chat_id}/messages", json={"content": "yes"}, headers=alice["headers"])
    buyer_notes = client.get("/api/notifications", headers=bob["headers"]).json()
    assert len(buyer_notes) == 1
    assert buyer_notes[0]["user_id"] == bob["user"]["id"]
    # the sender is never notified about their own message
    assert len(client.get("/api/notifications", headers=alice["headers"]).json()) == 2


def test_empty_message_rejected(client, alice, bob):
    listing = create_listing(client, alice["headers"])
    assert start_chat(client, bob["headers"], listing["id"], "").status_code == 400


def test_start_appends_when_chat_was_created_concurrently(client, alice, bob, db_session, monkeypatch):
    listing = create_listing(client, alice["headers"])
    existing = start_chat(client, bob["headers"], listing["id"], "first").json()["chat_id"]

    # the lookup misses once, as if the other request had not committed yet
    real_find = ChatService._find
    misses = []

    def find_after_race(self, listing_id, buyer_id):
        if not misses:
            misses.append((listing_id, buyer_id))
            return None
        return real_find(self, listing_id, buyer_id)

    monkeypatch.setattr(ChatService, "_find", find_after_race)

    buyer = db_session.get(User, bob["user"]["id"])
    svc = ChatService(db_session, NotificationService(db_session))
    chat, message, created = svc.start(buyer, listing["id"], "second")

    assert misses == [(listing["id"], bob["user"]["id"])]
    assert created is False
    assert chat.id == existing
    assert message.chat_id == existing
    assert message.content == "second"
    assert db_session.scalar(select(func.count(Chat.id))) == 1

    msgs = client.get(f"/api/chats/{existing}/messages", headers=bob["headers"]).json()
    assert [m["content"] for m in msgs] == ["first", "second"]
