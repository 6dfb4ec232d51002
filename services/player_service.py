"""
Player registry service.

Players are identities shared across games: they are registered once,
their nickname/photo can be edited, and they are never deleted here.
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from models import Player
from core.exceptions import PlayerNotFound, ValidationError
from database import transactional

logger = logging.getLogger(__name__)


def list_players(db: Session) -> List[Player]:
    return db.query(Player).order_by(Player.nickname, Player.id).all()


def get_player(db: Session, player_id: int) -> Player:
    player = db.query(Player).filter(Player.id == player_id).first()
    if not player:
        raise PlayerNotFound(player_id)
    return player


@transactional
def register_player(
    db: Session,
    nickname: str,
    photo_url: Optional[str] = None,
    external_id: Optional[str] = None
) -> Player:
    """
    Register a new player.

    Raises ValidationError when the nickname is blank or the external
    import id is already taken by another player.
    """
    if not nickname or not nickname.strip():
        raise ValidationError("Nickname must not be empty")

    player = Player(
        nickname=nickname.strip(),
        photo_url=photo_url,
        external_id=external_id or None
    )
    db.add(player)
    try:
        db.flush()
    except IntegrityError as e:
        raise ValidationError(f"External id {external_id!r} is already registered") from e

    logger.info(f"Registered player {player.id} ({player.nickname})")
    return player


@transactional
def update_player(
    db: Session,
    player_id: int,
    nickname: str,
    photo_url: Optional[str] = None
) -> Player:
    if not nickname or not nickname.strip():
        raise ValidationError("Nickname must not be empty")

    player = get_player(db, player_id)
    player.nickname = nickname.strip()
    player.photo_url = photo_url

    logger.info(f"Updated player {player_id} ({player.nickname})")
    return player
