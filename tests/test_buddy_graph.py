from __future__ import annotations

import itertools

import pytest
from sqlalchemy.exc import OperationalError

from src.models.block import Block
from src.models.buddy import BuddyLink
from src.models.event import Event
from src.services import buddies
from src.services.errors import Forbidden, NotFound

USER_IDS = [1, 2, 3, 4]


def _ids(views):
    return [v.id for v in views]


def _assert_graph_consistent(db):
    for u, v in itertools.permutations(USER_IDS, 2):
        assert (v in _ids(buddies.list_buddies(db, u))) == (u in _ids(buddies.list_buddies(db, v)))
    for u in USER_IDS:
        assert buddies.get_user(db, u).buddy_count == len(buddies.list_buddies(db, u))


def test_seed_graph_is_consistent(db):
    _assert_graph_consistent(db)


def test_listing_is_sorted_by_id(db):
    assert _ids(buddies.list_buddies(db, 1)) == [2, 3, 4]
    assert _ids(buddies.list_buddies(db, 4)) == [1, 2]


def test_block_removes_link_in_both_directions(db):
    assert buddies.block(db, 1, 4) is True
    assert 4 not in _ids(buddies.list_buddies(db, 1))
    assert 1 not in _ids(buddies.list_buddies(db, 4))
    assert db.query(BuddyLink).filter_by(user_min=1, user_max=4).first() is None
    _assert_graph_consistent(db)


def test_block_is_idempotent(db):
    assert buddies.block(db, 1, 4) is True
    assert buddies.block(db, 1, 4) is False
    assert db.query(Block).filter_by(blocker_id=1, blocked_id=4).count() == 1


def test_block_without_link(db):
    assert buddies.block(db, 3, 4) is True
    assert db.query(Block).filter_by(blocker_id=3, blocked_id=4).count() == 1
    with pytest.raises(Forbidden):
        buddies.add_buddy(db, 4, 3)


def test_mutual_block_then_single_unblock_keeps_pair_blocked(db):
    buddies.block(db, 1, 2)
    buddies.block(db, 2, 1)
    assert buddies.unblock(db, 1, 2) is True
    with pytest.raises(Forbidden) as exc:
        buddies.add_buddy(db, 1, 2)
    assert exc.value.code == "blocked"
    assert _ids(buddies.list_blocked(db, 2)) == [1]
    assert buddies.list_blocked(db, 1) == []


def test_unblock_does_not_restore_link(db):
    buddies.block(db, 2, 3)
    buddies.unblock(db, 2, 3)
    assert 3 not in _ids(buddies.list_buddies(db, 2))
    assert buddies.unblock(db, 2, 3) is False


def test_add_then_remove_round_trip(db):
    before = {u: _ids(buddies.list_buddies(db, u)) for u in USER_IDS}
    assert buddies.add_buddy(db, 3, 4) is True
    assert buddies.add_buddy(db, 4, 3) is False
    assert buddies.remove_buddy(db, 4, 3) is True
    assert buddies.remove_buddy(db, 3, 4) is False
    after = {u: _ids(buddies.list_buddies(db, u)) for u in USER_IDS}
    assert before == after


def test_remove_buddy_keeps_blocks(db):
    buddies.block(db, 1, 2)
    buddies.remove_buddy(db, 1, 2)
    assert db.query(Block).filter_by(blocker_id=1, blocked_id=2).count() == 1


def test_add_buddy_validation(db):
    with pytest.raises(Forbidden) as exc:
        buddies.add_buddy(db, 2, 2)
    assert exc.value.code == "self_link"
    with pytest.raises(NotFound):
        buddies.add_buddy(db, 2, 404)
    with pytest.raises(Forbidden):
        buddies.block(db, 2, 2)


def test_listing_filters_blocks_even_if_link_survived(db):
    # Битые данные: блокировка вставлена мимо сервиса, связь осталась
    db.add(Block(blocker_id=4, blocked_id=1))
    db.commit()
    assert 4 not in _ids(buddies.list_buddies(db, 1))
    assert 1 not in _ids(buddies.list_buddies(db, 4))
    assert buddies.get_user(db, 1).buddy_count == 2
    _assert_graph_consistent(db)


def test_course_listing_is_subset_of_buddies(db):
    in_course = _ids(buddies.list_buddies_in_course(db, 1, 1))
    assert in_course == [2, 4]
    assert set(in_course) <= set(_ids(buddies.list_buddies(db, 1)))

    buddies.block(db, 1, 2)
    assert _ids(buddies.list_buddies_in_course(db, 1, 1)) == [4]
    assert _ids(buddies.list_buddies_in_course(db, 3, 2)) == [1]


def test_buddy_counts_batch(db):
    assert buddies.buddy_counts(db, []) == {}
    assert buddies.buddy_counts(db, [1, 2, 3, 4]) == {1: 3, 2: 3, 3: 2, 4: 2}


def test_mutations_record_events_only_on_change(db):
    buddies.add_buddy(db, 3, 4)
    buddies.add_buddy(db, 3, 4)
    buddies.block(db, 3, 4)
    buddies.block(db, 3, 4)
    types = [e.type for e in db.query(Event).order_by(Event.id).all()]
    assert types == ["buddy_added", "user_blocked"]
    blocked = db.query(Event).filter_by(type="user_blocked").one()
    assert blocked.data == {"link_dissolved": True}


def test_failed_mutation_leaves_state_unchanged(db):
    buddies.block(db, 1, 2)
    with pytest.raises(Forbidden):
        buddies.add_buddy(db, 2, 1)
    assert db.query(BuddyLink).filter_by(user_min=1, user_max=2).first() is None
    assert db.query(Event).filter_by(type="buddy_added").count() == 0


def test_storage_failure_on_block_leaves_link_and_writes_nothing(db, monkeypatch):
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(OperationalError):
        buddies.block(db, 1, 2)
    monkeypatch.undo()

    assert db.query(BuddyLink).filter_by(user_min=1, user_max=2).count() == 1
    assert db.query(Block).count() == 0
    assert db.query(Event).count() == 0
    assert 2 in _ids(buddies.list_buddies(db, 1))


def test_get_user_id_beyond_integer_range(db):
    with pytest.raises(NotFound):
        buddies.get_user(db, 10 ** 20)
    with pytest.raises(NotFound):
        buddies.remove_buddy(db, 1, -(10 ** 20))
