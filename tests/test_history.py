from datetime import datetime

from bson import ObjectId

from conftest import insert, make_user


def _history(user_id, partner_id, when, **overrides):
    data = {
        "user_id": user_id,
        "partner_id": partner_id,
        "plant_name": "Tomat cherry",
        "date": when,
        "notes": None,
        "type": "post",
    }
    data.update(overrides)
    return data


def test_history_expands_both_parties_and_source(client, db, admin_headers, member, day):
    partner = make_user(db, "budi@example.com", name="Budi")
    post_id = insert(db, "post", {"user_id": str(member["_id"]), "title": "Benih tomat"}, day(1))
    insert(db, "history", _history(str(member["_id"]), str(partner["_id"]), day(2), post_id=post_id), day(2))

    response = client.get("/api/history", headers=admin_headers)

    assert response.status_code == 200
    [item] = response.json()
    assert item["user"]["name"] == "Siti"
    assert item["partner"] == {"id": str(partner["_id"]), "name": "Budi", "email": "budi@example.com"}
    assert item["post"] == {"id": post_id, "title": "Benih tomat"}
    assert item["request"] is None


def test_history_substitutes_missing_users(client, db, admin_headers, day):
    insert(db, "history", _history(str(ObjectId()), "broken-ref", day(2), post_id=str(ObjectId())), day(2))

    [item] = client.get("/api/history", headers=admin_headers).json()

    assert item["user"] == {"name": "Unknown User", "email": ""}
    assert item["partner"] == {"name": "Unknown Partner", "email": ""}
    assert item["post"] is None
    assert item["partner_id"] == "broken-ref"


def test_history_sorted_by_exchange_date(client, db, admin_headers, member, day):
    uid = str(member["_id"])
    insert(db, "history", _history(uid, uid, datetime(2026, 3, 1), plant_name="early"), day(10))
    insert(db, "history", _history(uid, uid, datetime(2026, 9, 1), plant_name="late"), day(1))

    items = client.get("/api/history", headers=admin_headers).json()

    assert [i["plant_name"] for i in items] == ["late", "early"]


def test_history_request_reference(client, db, admin_headers, member, day):
    uid = str(member["_id"])
    request_id = insert(db, "request", {"user_id": uid, "plant_name": "Kemangi"}, day(1))
    history_id = insert(db, "history", _history(uid, uid, day(2), type="request", request_id=request_id), day(2))

    response = client.get(f"/api/history/{history_id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["request"] == {"id": request_id, "plant_name": "Kemangi"}


def test_delete_history_removes_only_that_record(client, db, admin_headers, member, day):
    uid = str(member["_id"])
    keep = insert(db, "history", _history(uid, uid, day(1), plant_name="keep"), day(1))
    drop = insert(db, "history", _history(uid, uid, day(2), plant_name="drop"), day(2))

    response = client.delete(f"/api/history/{drop}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "History deleted successfully"}
    assert [i["id"] for i in client.get("/api/history", headers=admin_headers).json()] == [keep]
    assert client.delete(f"/api/history/{drop}", headers=admin_headers).status_code == 404
