"""
Тесты жизненного цикла заявки в друзья: none -> pending -> accepted, удаление из любого состояния.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.friends.dao import FriendDAO
from app.friends.models import Friend


@pytest.mark.asyncio
async def test_request_then_accept_by_target(client, make_user, auth):
    token_a, alice = await make_user("alice")
    token_b, bob = await make_user("bob")

    resp = await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))
    assert resp.status_code == 200

    friends_a = (await client.get("/api/friends", headers=auth(token_a))).json()
    assert friends_a == [{
        "id": bob["id"], "username": "bob", "email": "bob@example.com", "avatar": None,
        "status": "pending", "request_direction": "sent",
    }]
    friends_b = (await client.get("/api/friends", headers=auth(token_b))).json()
    assert friends_b[0]["id"] == alice["id"]
    assert friends_b[0]["request_direction"] == "received"

    # принять может только получатель
    resp = await client.post(f"/api/friends/accept/{bob['id']}", headers=auth(token_a))
    assert resp.status_code == 404

    resp = await client.post(f"/api/friends/accept/{alice['id']}", headers=auth(token_b))
    assert resp.status_code == 200

    friends_a = (await client.get("/api/friends", headers=auth(token_a))).json()
    assert friends_a[0]["status"] == "accepted"

    # повторное принятие - заявки в статусе pending уже нет
    resp = await client.post(f"/api/friends/accept/{alice['id']}", headers=auth(token_b))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_request_to_self_is_invalid(client, make_user, auth):
    token, alice = await make_user("alice")
    resp = await client.post(f"/api/friends/request/{alice['id']}", headers=auth(token))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_request_to_unknown_user_is_not_found(client, make_user, auth):
    token, _ = await make_user("alice")
    resp = await client.post("/api/friends/request/9999", headers=auth(token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_and_reverse_requests_conflict(client, make_user, auth):
    token_a, alice = await make_user("alice")
    token_b, bob = await make_user("bob")

    assert (await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))).status_code == 200

    resp = await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))
    assert resp.status_code == 409

    resp = await client.post(f"/api/friends/request/{alice['id']}", headers=auth(token_b))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_reverse_pair_is_blocked_by_storage(fake_session, bulk_users):
    """Даже в обход проверки в роутере A->B и B->A не могут существовать одновременно."""
    alice, bob = await bulk_users("alice", "bob")
    await FriendDAO.add_request(fake_session, user_id=alice.id, friend_id=bob.id)

    with pytest.raises(IntegrityError):
        await FriendDAO.add_request(fake_session, user_id=bob.id, friend_id=alice.id)


def test_pair_columns_are_ordered():
    edge = Friend(user_id=7, friend_id=3)
    assert (edge.pair_low, edge.pair_high) == (3, 7)


@pytest.mark.asyncio
async def test_remove_is_idempotent(client, make_user, auth):
    token_a, _ = await make_user("alice")
    token_b, bob = await make_user("bob")
    await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))

    for _ in range(2):
        resp = await client.delete(f"/api/friends/{bob['id']}", headers=auth(token_a))
        assert resp.status_code == 200

    assert (await client.get("/api/friends", headers=auth(token_a))).json() == []
    assert (await client.get("/api/friends", headers=auth(token_b))).json() == []


@pytest.mark.asyncio
async def test_remove_by_target_deletes_edge(client, make_user, auth):
    token_a, alice = await make_user("alice")
    token_b, bob = await make_user("bob")
    await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))
    await client.post(f"/api/friends/accept/{alice['id']}", headers=auth(token_b))

    resp = await client.delete(f"/api/friends/{alice['id']}", headers=auth(token_b))
    assert resp.status_code == 200
    assert (await client.get("/api/friends", headers=auth(token_a))).json() == []

    # после удаления можно отправить заявку заново, в любую сторону
    resp = await client.post(f"/api/friends/request/{alice['id']}", headers=auth(token_b))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_search_annotates_relationship(client, make_user, auth):
    token_a, alice = await make_user("alice")
    token_b, bob = await make_user("bob")
    token_c, carol = await make_user("carol")
    await make_user("bobby")

    await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))
    await client.post(f"/api/friends/request/{alice['id']}", headers=auth(token_c))

    resp = await client.get("/api/users/search", params={"q": "BOB"}, headers=auth(token_a))
    assert resp.status_code == 200
    results = {r["username"]: r for r in resp.json()}
    assert set(results) == {"bob", "bobby"}
    assert results["bob"]["friend_status"] == "pending"
    assert results["bob"]["request_direction"] == "sent"
    assert results["bobby"]["friend_status"] is None
    assert results["bobby"]["request_direction"] is None

    resp = await client.get("/api/users/search", params={"q": "carol@"}, headers=auth(token_a))
    [found] = resp.json()
    assert found["request_direction"] == "received"

    # себя в результатах нет
    resp = await client.get("/api/users/search", params={"q": "alice"}, headers=auth(token_a))
    assert resp.json() == []


@pytest.mark.asyncio
async def test_search_direction_cleared_once_accepted(client, make_user, auth):
    token_a, alice = await make_user("alice")
    token_b, bob = await make_user("bob")
    await client.post(f"/api/friends/request/{bob['id']}", headers=auth(token_a))
    await client.post(f"/api/friends/accept/{alice['id']}", headers=auth(token_b))

    [found] = (await client.get("/api/users/search", params={"q": "bob"}, headers=auth(token_a))).json()
    assert found["friend_status"] == "accepted"
    assert found["request_direction"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("q", ["", "a", "  b  "])
async def test_search_query_too_short(client, make_user, auth, q):
    token, _ = await make_user("alice")
    resp = await client.get("/api/users/search", params={"q": q}, headers=auth(token))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_search_is_capped_at_20(client, make_user, auth, bulk_users):
    token, _ = await make_user("alice")
    await bulk_users(*[f"member{i:02d}" for i in range(25)])

    resp = await client.get("/api/users/search", params={"q": "member"}, headers=auth(token))
    assert resp.status_code == 200
    assert len(resp.json()) == 20


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client, make_user, auth, bulk_users):
    token, _ = await make_user("alice")
    await bulk_users("a_b_user", "axbxuser")

    resp = await client.get("/api/users/search", params={"q": "a_b"}, headers=auth(token))
    assert [r["username"] for r in resp.json()] == ["a_b_user"]


@pytest.mark.asyncio
async def test_status_is_stored_as_lowercase_value(fake_session, bulk_users):
    from sqlalchemy import text

    alice, bob = await bulk_users("alice", "bob")
    await FriendDAO.add_request(fake_session, user_id=alice.id, friend_id=bob.id)
    assert (await fake_session.execute(text("SELECT status FROM friends"))).scalar_one() == "pending"

    await FriendDAO.accept(fake_session, requester_id=alice.id, target_id=bob.id)
    assert (await fake_session.execute(text("SELECT status FROM friends"))).scalar_one() == "accepted"
