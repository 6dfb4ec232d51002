"""
Game API Endpoints - 短輪詢版

重點：
1. 所有業務邏輯集中在 GameManager / EventLedger
2. Overlay 與主持人頁面靠 GET /current 輪詢取得最新狀態
3. 序號撞號（ConcurrencyConflict）由這一層做有限次重試，仍失敗回 409
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import logging

from database import get_db, retry_on_conflict
from schemas import (
    GameCreate,
    GameCreatedResponse,
    GameStateResponse,
    RoleUpdate,
    StatusUpdate,
    StatusUpdateResponse,
    EventCreate,
    EventCreatedResponse,
    SuccessResponse
)
from core.game_manager import GameManager
from core.event_ledger import EventLedger
from core.exceptions import (
    ConcurrencyConflict,
    NotFound,
    ValidationError
)

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


@router.get("/current", response_model=GameStateResponse)
def get_current_game(db: Session = Depends(get_db)):
    """
    取得目前進行中的遊戲（overlay 輪詢用）

    返回：
        - game: 遊戲資訊
        - players: 座位（依 position 排序，含暱稱與照片）
        - events: 事件（依 event_order 排序，含相關玩家暱稱）
    """
    try:
        return GameManager.get_active_game(db)

    except NotFound:
        raise HTTPException(status_code=404, detail="No active game")
    except Exception as e:
        logger.error(f"Failed to get current game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{game_id}", response_model=GameStateResponse)
def get_game(game_id: int, db: Session = Depends(get_db)):
    try:
        return GameManager.get_game_view(db, game_id)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("", response_model=GameCreatedResponse)
def create_game(game_data: GameCreate, db: Session = Depends(get_db)):
    """
    開新局（主持人 endpoint）

    效果：
    - 目前的 active 遊戲變成 finished
    - 新遊戲變成 active，10 位玩家依順序坐 1..10 號位
    """
    try:
        game = retry_on_conflict(
            GameManager.create_game,
            db,
            game_data.game_number,
            game_data.player_ids,
            tournament_id=game_data.tournament_id
        )
        return GameCreatedResponse(id=game.id, game_number=game.game_number)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrencyConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/players/{player_id}/role", response_model=SuccessResponse)
def set_player_role(
    game_id: int,
    player_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db)
):
    """設定座位角色（任何字串都接受）"""
    try:
        GameManager.set_seat_role(db, game_id, player_id, role_data.role)
        return SuccessResponse()

    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set role: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/players/{player_id}/status", response_model=StatusUpdateResponse)
def set_player_status(
    game_id: int,
    player_id: int,
    status_data: StatusUpdate,
    db: Session = Depends(get_db)
):
    """
    設定座位狀態（出局 / 回到場上）

    返回：
        - exit_order: 出局順序
    """
    try:
        exit_order = retry_on_conflict(
            GameManager.set_seat_status,
            db,
            game_id,
            player_id,
            status_data.status,
            exit_type=status_data.exit_type
        )
        return StatusUpdateResponse(exit_order=exit_order)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrencyConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/events", response_model=EventCreatedResponse)
def add_event(game_id: int, event_data: EventCreate, db: Session = Depends(get_db)):
    """
    追加事件（擊殺 / 投票 / 查驗）

    返回：
        - event_order: 事件順序
    """
    try:
        event_order = retry_on_conflict(
            EventLedger.append_event,
            db,
            game_id,
            event_data.event_type,
            player_id=event_data.player_id,
            checked_player_id=event_data.checked_player_id,
            result=event_data.result
        )
        return EventCreatedResponse(event_order=event_order)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrencyConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to add event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{game_id}/events/last", response_model=SuccessResponse)
def delete_last_event(game_id: int, db: Session = Depends(get_db)):
    """撤銷最後一筆事件（沒有事件時也回成功）"""
    try:
        EventLedger.delete_last_event(db, game_id)
        return SuccessResponse()

    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete last event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
