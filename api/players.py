"""
Player API Endpoints

職責：
1. 列出 / 查詢玩家
2. 註冊玩家
3. 修改玩家暱稱與照片
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas import (
    PlayerCreate,
    PlayerUpdate,
    PlayerResponse,
    PlayerCreatedResponse,
    SuccessResponse
)
from services import player_service
from core.exceptions import PlayerNotFound, ValidationError

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[PlayerResponse])
def list_players(db: Session = Depends(get_db)):
    """列出所有玩家（依暱稱排序）"""
    try:
        return player_service.list_players(db)
    except Exception as e:
        logger.error(f"Failed to list players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{player_id}", response_model=PlayerResponse)
def get_player(player_id: int, db: Session = Depends(get_db)):
    try:
        return player_service.get_player(db, player_id)
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except Exception as e:
        logger.error(f"Failed to get player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("", response_model=PlayerCreatedResponse)
def register_player(player_data: PlayerCreate, db: Session = Depends(get_db)):
    """
    註冊玩家

    external_id 是外部系統匯入用的代號，可省略，但不能重複
    """
    try:
        player = player_service.register_player(
            db,
            player_data.nickname,
            photo_url=player_data.photo_url,
            external_id=player_data.external_id
        )
        return PlayerCreatedResponse(
            id=player.id,
            nickname=player.nickname,
            photo_url=player.photo_url
        )

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to register player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.put("/{player_id}", response_model=SuccessResponse)
def update_player(player_id: int, player_data: PlayerUpdate, db: Session = Depends(get_db)):
    try:
        player_service.update_player(
            db,
            player_id,
            player_data.nickname,
            photo_url=player_data.photo_url
        )
        return SuccessResponse()

    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
