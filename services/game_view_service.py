"""
Game view service.

Builds the merged read model that the overlay and the admin page poll:
the game row, its seats joined with player nickname/photo (ordered by
position) and its event log joined with the nicknames of the acting and
checked players (ordered by event order).
"""
from typing import List, Dict, Any

from sqlalchemy.orm import Session, aliased

from models import Game, GamePlayer, GameEvent, Player


def game_to_dict(game: Game) -> Dict[str, Any]:
    return {
        "id": game.id,
        "tournament_id": game.tournament_id,
        "game_number": game.game_number,
        "status": game.status,
        "created_at": game.created_at,
    }


def get_seats(game_id: int, db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(GamePlayer, Player.nickname, Player.photo_url)
        .join(Player, GamePlayer.player_id == Player.id)
        .filter(GamePlayer.game_id == game_id)
        .order_by(GamePlayer.position)
        .all()
    )

    return [
        {
            "id": seat.id,
            "game_id": seat.game_id,
            "player_id": seat.player_id,
            "position": seat.position,
            "role": seat.role,
            "status": seat.status,
            "exit_type": seat.exit_type,
            "exit_order": seat.exit_order,
            "nickname": nickname,
            "photo_url": photo_url,
        }
        for seat, nickname, photo_url in rows
    ]


def get_events(game_id: int, db: Session) -> List[Dict[str, Any]]:
    actor = aliased(Player)
    checked = aliased(Player)

    # Outer joins: kills/votes carry player_id, checks carry checked_player_id.
    rows = (
        db.query(GameEvent, actor.nickname, checked.nickname)
        .outerjoin(actor, GameEvent.player_id == actor.id)
        .outerjoin(checked, GameEvent.checked_player_id == checked.id)
        .filter(GameEvent.game_id == game_id)
        .order_by(GameEvent.event_order)
        .all()
    )

    return [
        {
            "id": event.id,
            "game_id": event.game_id,
            "event_type": event.event_type,
            "player_id": event.player_id,
            "checked_player_id": event.checked_player_id,
            "event_order": event.event_order,
            "result": event.result,
            "player_nickname": player_nickname,
            "checked_player_nickname": checked_nickname,
            "created_at": event.created_at,
        }
        for event, player_nickname, checked_nickname in rows
    ]


def build_game_view(game: Game, db: Session) -> Dict[str, Any]:
    """
    Return {"game": ..., "players": [...], "events": [...]} for one game.

    The key is "players" rather than "seats" to keep the payload shape the
    overlay page already consumes.
    """
    return {
        "game": game_to_dict(game),
        "players": get_seats(game.id, db),
        "events": get_events(game.id, db),
    }
