"""
Pydantic schemas：API 的 request / response 格式
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import GameStatus, SeatStatus, ExitType, EventType, SEATS_PER_GAME


# ============ Player ============

class PlayerCreate(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=100)
    photo_url: Optional[str] = None
    external_id: Optional[str] = None


class PlayerUpdate(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=100)
    photo_url: Optional[str] = None


class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: Optional[str] = None
    nickname: str
    photo_url: Optional[str] = None


class PlayerCreatedResponse(BaseModel):
    id: int
    nickname: str
    photo_url: Optional[str] = None


# ============ Game ============

class GameCreate(BaseModel):
    game_number: int
    # 數量與重複由 GameManager 驗證（回 400），這裡只檢查型別
    player_ids: List[int]
    tournament_id: Optional[int] = None


class GameCreatedResponse(BaseModel):
    id: int
    game_number: int


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: Optional[int] = None
    game_number: int
    status: GameStatus
    created_at: Optional[datetime] = None


class SeatResponse(BaseModel):
    id: int
    game_id: int
    player_id: int
    position: int = Field(..., ge=1, le=SEATS_PER_GAME)
    role: Optional[str] = None
    status: SeatStatus
    exit_type: Optional[ExitType] = None
    exit_order: Optional[int] = None
    nickname: str
    photo_url: Optional[str] = None


class EventResponse(BaseModel):
    id: int
    game_id: int
    event_type: EventType
    player_id: Optional[int] = None
    checked_player_id: Optional[int] = None
    event_order: int
    result: Optional[str] = None
    player_nickname: Optional[str] = None
    checked_player_nickname: Optional[str] = None
    created_at: Optional[datetime] = None


class GameStateResponse(BaseModel):
    """Overlay / admin 輪詢用的完整狀態"""
    game: GameResponse
    players: List[SeatResponse]
    events: List[EventResponse]


# ============ Seat 操作 ============

class RoleUpdate(BaseModel):
    role: Optional[str] = None


class StatusUpdate(BaseModel):
    status: SeatStatus
    exit_type: Optional[ExitType] = None


class StatusUpdateResponse(BaseModel):
    success: bool = True
    exit_order: Optional[int] = None


# ============ Event 操作 ============

class EventCreate(BaseModel):
    event_type: EventType
    player_id: Optional[int] = None
    checked_player_id: Optional[int] = None
    result: Optional[str] = None


class EventCreatedResponse(BaseModel):
    success: bool = True
    event_order: int


class SuccessResponse(BaseModel):
    success: bool = True
