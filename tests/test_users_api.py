from __future__ import annotations


def _ids(resp):
    return [u["id"] for u in resp.json()]


def test_get_self(client, as_user):
    as_user(1)
    r = client.get("/api/users")
    assert r.status_code == 200
    body = r.json()
    assert body == {
        "id": 1,
        "name": "Pink Elephant",
        "email": "pink.elephant@gmail.com",
        "pairingEnabled": False,
        "buddyCount": 3,
    }


def test_get_existing_user(client):
    r = client.get("/api/users/1")
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == 1
    assert body["name"] == "Pink Elephant"
    assert body["email"] == "pink.elephant@gmail.com"
    assert body["pairingEnabled"] is False
    assert body["buddyCount"] == 3


def test_get_non_existing_user(client):
    r = client.get("/api/users/987654321987", params={"pairingEnabled": "true"})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "user_not_found"


def test_update_pairing_enabled_for_self(client, as_user):
    as_user(1)
    r = client.put("/api/users", params={"pairingEnabled": "true"})
    assert r.status_code == 200
    assert client.get("/api/users").json()["pairingEnabled"] is True
    # остальных не задело
    assert client.get("/api/users/2").json()["pairingEnabled"] is False


def test_update_pairing_requires_flag(client, as_user):
    as_user(1)
    r = client.put("/api/users")
    assert r.status_code == 422


def test_get_user_buddies(client, as_user):
    as_user(2)
    r = client.get("/api/users/buddy")
    assert r.status_code == 200
    body = r.json()
    assert _ids(r) == [1, 3, 4]
    assert body[0]["name"] == "Pink Elephant"
    assert body[1]["name"] == "Hiruna Smith"
    assert body[1]["email"] == "hiruna.smith@gmail.com"
    assert body[2]["name"] == "Flynn Smith"
    assert all(u["pairingEnabled"] is False for u in body)


def test_buddy_count_in_listing_is_viewer_neutral(client, as_user):
    as_user(2)
    body = client.get("/api/users/buddy").json()
    counts = {u["id"]: u["buddyCount"] for u in body}
    assert counts == {1: 3, 3: 2, 4: 2}


def test_get_user_buddies_in_course(client, as_user):
    as_user(1)
    r = client.get("/api/users/buddy/course/1")
    assert r.status_code == 200
    body = r.json()
    assert _ids(r) == [2, 4]
    assert body[0]["name"] == "Green Dinosaur"
    assert body[0]["email"] == "green.dinosaur@gmail.com"
    assert body[1]["name"] == "Flynn Smith"


def test_buddies_in_unknown_course(client, as_user):
    as_user(1)
    r = client.get("/api/users/buddy/course/42")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "course_not_found"


def test_create_and_delete_user_buddy(client, as_user, notifier):
    as_user(3)
    r = client.post("/api/users/buddy/4")
    assert r.status_code == 200
    assert r.json()["created"] is True
    assert 4 in _ids(client.get("/api/users/buddy"))

    r = client.delete("/api/users/buddy/4")
    assert r.status_code == 200
    assert 4 not in _ids(client.get("/api/users/buddy"))

    assert [m["type"] for m in notifier.messages] == ["buddy_added", "buddy_removed"]


def test_add_buddy_twice_is_idempotent(client, as_user, notifier):
    as_user(3)
    assert client.post("/api/users/buddy/4").json()["created"] is True
    r = client.post("/api/users/buddy/4")
    assert r.status_code == 200
    assert r.json()["created"] is False
    assert client.get("/api/users").json()["buddyCount"] == 3
    assert len(notifier.messages) == 1


def test_remove_missing_buddy_is_ok(client, as_user):
    as_user(3)
    r = client.delete("/api/users/buddy/4")
    assert r.status_code == 200
    assert r.json()["removed"] is False


def test_add_self_as_buddy_forbidden(client, as_user):
    as_user(3)
    r = client.post("/api/users/buddy/3")
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "self_link"


def test_add_unknown_buddy_not_found(client, as_user):
    as_user(3)
    assert client.post("/api/users/buddy/999").status_code == 404
    assert client.delete("/api/users/buddy/999").status_code == 404
    assert client.post("/api/users/buddy/999/block").status_code == 404


def test_block_user(client, as_user):
    as_user(2)
    assert _ids(client.get("/api/users/buddy"))[0] == 1

    assert client.post("/api/users/buddy/1/block").status_code == 200
    assert _ids(client.get("/api/users/buddy"))[0] == 3

    assert client.post("/api/users/buddy/3/block").status_code == 200
    assert _ids(client.get("/api/users/buddy"))[0] == 4


def test_block_hides_both_sides_and_forbids_relink(client, as_user):
    as_user(2)
    client.post("/api/users/buddy/1/block")
    assert client.get("/api/users").json()["buddyCount"] == 2

    as_user(1)
    assert 2 not in _ids(client.get("/api/users/buddy"))
    assert client.get("/api/users").json()["buddyCount"] == 2
    r = client.post("/api/users/buddy/2")
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "blocked"


def test_blocked_list_and_unblock(client, as_user):
    as_user(2)
    client.post("/api/users/buddy/1/block")
    assert _ids(client.get("/api/users/blocked")) == [1]

    assert client.delete("/api/users/buddy/1/block").status_code == 200
    assert client.get("/api/users/blocked").json() == []
    # связь не восстанавливается сама
    assert 1 not in _ids(client.get("/api/users/buddy"))
    assert client.post("/api/users/buddy/1").status_code == 200
    assert 1 in _ids(client.get("/api/users/buddy"))


def test_self_endpoints_require_session(client):
    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users/buddy").status_code == 401
    assert client.put("/api/users", params={"pairingEnabled": "true"}).status_code == 401
    r = client.post("/api/users/buddy/4")
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "not_authenticated"


def test_ids_beyond_integer_range_are_not_found(client, as_user):
    huge = "99999999999999999999"
    assert client.get(f"/api/users/{huge}").status_code == 404

    as_user(1)
    r = client.post(f"/api/users/buddy/{huge}")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "user_not_found"
    assert client.delete(f"/api/users/buddy/{huge}").status_code == 404
    assert client.post(f"/api/users/buddy/{huge}/block").status_code == 404
    assert client.delete(f"/api/users/buddy/{huge}/block").status_code == 404
    assert client.get(f"/api/users/buddy/course/{huge}").status_code == 404
    assert client.get("/api/users").json()["buddyCount"] == 3
