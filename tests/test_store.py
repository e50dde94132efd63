import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError, OperationalError

from campus_market.core.errors import AppError
from campus_market.models.chat import Chat
from campus_market.models.listing import Category, Listing, ListingImage
from campus_market.models.user import User
from campus_market.services.categories import SEED_CATEGORIES, seed_categories
from conftest import create_listing


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_categories_seeded_once(client, db_session):
    body = client.get("/api/categories").json()
    assert [c["name"] for c in body] == [name for name, _, _ in SEED_CATEGORIES]
    assert body[0] == {"id": 1, "name": "Textbooks", "description": "Academic textbooks and study materials", "icon": "book"}

    assert seed_categories(db_session) == 0
    assert db_session.query(Category).count() == len(SEED_CATEGORIES)


def test_soft_deleted_rows_hidden_unless_asked(client, alice, db_session):
    listing = create_listing(client, alice["headers"], images=["/uploads/a.jpg"])
    client.delete(f"/api/listings/{listing['id']}", headers=alice["headers"])

    assert db_session.scalars(select(Listing).where(Listing.id == listing["id"])).first() is None
    assert db_session.scalars(select(ListingImage)).all() == []

    q = select(Listing).where(Listing.id == listing["id"]).execution_options(include_deleted=True)
    row = db_session.scalars(q).first()
    assert row is not None
    assert row.deleted_at is not None
    images = db_session.scalars(select(ListingImage).execution_options(include_deleted=True)).all()
    assert len(images) == 1
    assert images[0].deleted_at is not None


def test_replaced_images_are_kept_as_deleted(client, alice, db_session):
    listing = create_listing(client, alice["headers"], images=["/uploads/a.jpg", "/uploads/b.jpg"])
    client.put(f"/api/listings/{listing['id']}", json={"images": ["/uploads/c.jpg"]}, headers=alice["headers"])

    live = db_session.scalars(select(ListingImage)).all()
    assert [(i.image_url, i.is_primary) for i in live] == [("/uploads/c.jpg", True)]
    everything = db_session.scalars(select(ListingImage).execution_options(include_deleted=True)).all()
    assert len(everything) == 3


def test_unused_collections_are_never_lazy_loaded(client, alice, bob, db_session):
    listing = create_listing(client, alice["headers"])
    client.post("/api/chats", json={"listing_id": listing["id"], "message": "hi"}, headers=bob["headers"])

    user = db_session.get(User, alice["user"]["id"])
    chat = db_session.scalars(select(Chat)).one()
    with pytest.raises(InvalidRequestError):
        user.listings
    with pytest.raises(InvalidRequestError):
        chat.messages


def test_server_errors_hide_details(app):
    @app.get("/boom/app")
    def app_boom():
        raise AppError("listings table is locked")

    @app.get("/boom/db")
    def db_boom():
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    with TestClient(app) as c:
        for path in ("/boom/app", "/boom/db"):
            r = c.get(path)
            assert r.status_code == 500
            assert r.json() == {"detail": "Internal server error"}
            assert r.headers["X-Request-ID"]
