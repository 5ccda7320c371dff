from bson import ObjectId

from conftest import insert


def _article(user_id, **overrides):
    data = {"user_id": user_id, "title": "Menanam cabai", "content": "<p>Langkah awal</p>"}
    data.update(overrides)
    return data


def test_create_article_expands_author(client, db, admin, admin_headers, member):
    payload = _article(str(member["_id"]), tags=["cabai", " cabai", "", "sayur"])

    response = client.post("/api/articles", json=payload, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Menanam cabai"
    assert body["tags"] == ["cabai", "sayur"]
    assert body["image"] == ""
    assert body["user"] == {"id": str(member["_id"]), "name": "Siti", "email": "siti@example.com"}
    assert db["article"].count_documents({}) == 1


def test_create_article_missing_field_is_rejected(client, db, admin_headers, member):
    payload = _article(str(member["_id"]))
    del payload["content"]

    response = client.post("/api/articles", json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert db["article"].count_documents({}) == 0


def test_create_article_for_unknown_user(client, db, admin_headers):
    response = client.post("/api/articles", json=_article(str(ObjectId())), headers=admin_headers)

    assert response.status_code == 404
    assert db["article"].count_documents({}) == 0


def test_create_article_with_malformed_user_id(client, db, admin_headers):
    response = client.post("/api/articles", json=_article("not-an-id"), headers=admin_headers)
    assert response.status_code == 400


def test_list_articles_newest_first(client, db, admin_headers, member, day):
    uid = str(member["_id"])
    insert(db, "article", _article(uid, title="old"), day(1))
    insert(db, "article", _article(uid, title="new"), day(9))
    insert(db, "article", _article(uid, title="middle"), day(5))

    response = client.get("/api/articles", headers=admin_headers)

    assert response.status_code == 200
    assert [a["title"] for a in response.json()] == ["new", "middle", "old"]
    assert all(a["user"]["name"] == "Siti" for a in response.json())


def test_list_articles_search(client, db, admin_headers, member, day):
    uid = str(member["_id"])
    insert(db, "article", _article(uid, title="Pupuk kompos"), day(1))
    insert(db, "article", _article(uid, title="Benih tomat", category="benih"), day(2))

    found = client.get("/api/articles", params={"q": "KOMPOS"}, headers=admin_headers).json()
    by_category = client.get("/api/articles", params={"category": "benih"}, headers=admin_headers).json()

    assert [a["title"] for a in found] == ["Pupuk kompos"]
    assert [a["title"] for a in by_category] == ["Benih tomat"]


def test_article_with_deleted_author(client, db, admin_headers, day):
    article_id = insert(db, "article", _article(str(ObjectId())), day(3))

    response = client.get(f"/api/articles/{article_id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"] is None


def test_get_article_not_found(client, admin_headers):
    assert client.get(f"/api/articles/{ObjectId()}", headers=admin_headers).status_code == 404
    assert client.get("/api/articles/xyz", headers=admin_headers).status_code == 400


def test_update_article_replaces_fields(client, db, admin_headers, member, day):
    article_id = insert(db, "article", _article(str(member["_id"]), image="a.jpg", tags=["x"]), day(3))

    response = client.put(
        f"/api/articles/{article_id}",
        json={"title": "Baru", "content": "Isi baru"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Baru"
    assert body["image"] == ""
    assert body["tags"] == []
    assert body["user"]["email"] == "siti@example.com"


def test_update_article_missing_title(client, db, admin_headers, member, day):
    article_id = insert(db, "article", _article(str(member["_id"])), day(3))

    response = client.put(f"/api/articles/{article_id}", json={"content": "x"}, headers=admin_headers)

    assert response.status_code == 400
    assert db["article"].find_one({"_id": ObjectId(article_id)})["title"] == "Menanam cabai"


def test_update_missing_article(client, admin_headers):
    response = client.put(f"/api/articles/{ObjectId()}", json={"title": "a", "content": "b"}, headers=admin_headers)
    assert response.status_code == 404


def test_delete_article_twice(client, db, admin_headers, member, day):
    article_id = insert(db, "article", _article(str(member["_id"])), day(3))

    first = client.delete(f"/api/articles/{article_id}", headers=admin_headers)
    second = client.delete(f"/api/articles/{article_id}", headers=admin_headers)

    assert first.status_code == 200
    assert first.json() == {"message": "Article deleted successfully"}
    assert second.status_code == 404
