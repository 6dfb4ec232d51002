"""
Tests for the per-game event log.
"""

import pytest

from models import EventType
from core.game_manager import GameManager
from core.event_ledger import EventLedger
from core.exceptions import ValidationError, GameNotFound


def event_orders(db, game_id):
    return [e.event_order for e in EventLedger.list_events(db, game_id)]


def test_first_event_gets_order_one(db, roster, game):
    assert EventLedger.append_event(db, game.id, "kill", player_id=roster[4]) == 1


def test_kill_round_trip(db, roster, game):
    EventLedger.append_event(db, game.id, "vote", player_id=roster[1])
    previous_max = max(event_orders(db, game.id))

    order = EventLedger.append_event(db, game.id, EventType.KILL, player_id=roster[4])

    events = GameManager.get_active_game(db)["events"]
    last = events[-1]
    assert order == previous_max + 1
    assert last["event_type"] == EventType.KILL
    assert last["player_id"] == roster[4]
    assert last["player_nickname"] == "Player5"
    assert last["checked_player_id"] is None
    assert last["event_order"] == order


def test_check_event_references_checked_player(db, roster, game):
    EventLedger.append_event(
        db, game.id, "check_sheriff",
        checked_player_id=roster[2],
        result="mafia"
    )

    event = GameManager.get_active_game(db)["events"][0]
    assert event["event_type"] == EventType.CHECK_SHERIFF
    assert event["player_id"] is None
    assert event["player_nickname"] is None
    assert event["checked_player_id"] == roster[2]
    assert event["checked_player_nickname"] == "Player3"
    assert event["result"] == "mafia"


def test_orders_strictly_increasing(db, roster, game):
    kinds = ["kill", "vote", "check_don", "check_sheriff", "vote"]
    orders = [EventLedger.append_event(db, game.id, kind, player_id=roster[0]) for kind in kinds]

    assert orders == [1, 2, 3, 4, 5]
    assert [e["event_order"] for e in GameManager.get_active_game(db)["events"]] == orders


def test_no_game_rule_validation(db, roster, bench, game):
    """The ledger records whatever the operator sends."""
    GameManager.set_seat_status(db, game.id, roster[0], "eliminated", "killed")

    EventLedger.append_event(db, game.id, "kill", player_id=roster[0])
    EventLedger.append_event(db, game.id, "check_don", checked_player_id=roster[1])
    EventLedger.append_event(db, game.id, "check_don", checked_player_id=roster[1])
    EventLedger.append_event(db, game.id, "vote", player_id=bench[0])

    assert event_orders(db, game.id) == [1, 2, 3, 4]


def test_orders_scoped_per_game(db, roster, game):
    EventLedger.append_event(db, game.id, "kill", player_id=roster[0])
    EventLedger.append_event(db, game.id, "kill", player_id=roster[1])

    other = GameManager.create_game(db, 2, roster)

    assert EventLedger.append_event(db, other.id, "vote", player_id=roster[2]) == 1
    # finished games still keep their own numbering
    assert EventLedger.append_event(db, game.id, "vote", player_id=roster[3]) == 3


def test_three_appends_then_undo(db, roster, game):
    for pid in roster[:3]:
        EventLedger.append_event(db, game.id, "kill", player_id=pid)

    EventLedger.delete_last_event(db, game.id)

    events = GameManager.get_active_game(db)["events"]
    assert len(events) == 2
    assert max(e["event_order"] for e in events) == 2
    assert [e["player_id"] for e in events] == roster[:2]


def test_undo_then_append_reuses_closed_gap(db, roster, game):
    for pid in roster[:3]:
        EventLedger.append_event(db, game.id, "vote", player_id=pid)

    EventLedger.delete_last_event(db, game.id)
    order = EventLedger.append_event(db, game.id, "kill", player_id=roster[5])

    assert order == 3
    assert event_orders(db, game.id) == [1, 2, 3]


def test_undo_until_empty(db, roster, game):
    EventLedger.append_event(db, game.id, "kill", player_id=roster[0])
    EventLedger.append_event(db, game.id, "vote", player_id=roster[1])

    assert EventLedger.delete_last_event(db, game.id) == 1
    assert event_orders(db, game.id) == [1]
    assert EventLedger.delete_last_event(db, game.id) == 1
    assert event_orders(db, game.id) == []


def test_undo_on_empty_ledger_is_noop(db, roster, game):
    assert EventLedger.delete_last_event(db, game.id) == 0
    assert event_orders(db, game.id) == []


def test_undo_does_not_touch_other_games(db, roster, game):
    EventLedger.append_event(db, game.id, "kill", player_id=roster[0])
    other = GameManager.create_game(db, 2, roster)
    EventLedger.append_event(db, other.id, "kill", player_id=roster[1])

    EventLedger.delete_last_event(db, other.id)

    assert event_orders(db, game.id) == [1]
    assert event_orders(db, other.id) == []


def test_undo_does_not_touch_exit_order(db, roster, game):
    EventLedger.append_event(db, game.id, "kill", player_id=roster[0])
    GameManager.set_seat_status(db, game.id, roster[0], "eliminated", "killed")

    EventLedger.delete_last_event(db, game.id)

    assert GameManager.get_seat(db, game.id, roster[0]).exit_order == 1


def test_invalid_event_type(db, roster, game):
    with pytest.raises(ValidationError):
        EventLedger.append_event(db, game.id, "heal", player_id=roster[0])

    assert event_orders(db, game.id) == []


def test_unknown_game(db, players):
    with pytest.raises(GameNotFound):
        EventLedger.append_event(db, 404, "kill", player_id=players[0])

    with pytest.raises(GameNotFound):
        EventLedger.delete_last_event(db, 404)
