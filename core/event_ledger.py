"""
Event Ledger：每場遊戲的事件紀錄（只能追加）

職責：
1. 追加事件（擊殺、投票、教父 / 警長查驗），蓋上 max(event_order) + 1
2. 撤銷最後一筆事件（唯一的刪除路徑）
3. 依順序列出事件

不做遊戲規則驗證：被擊殺 / 查驗的玩家是否還在場、每晚是否只查驗一次，
都由主持人介面負責
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from models import GameEvent, EventType, Player
from core.locks import with_game_lock
from core.exceptions import ConcurrencyConflict, GameNotFound, PlayerNotFound
from services.sequence_service import next_sequence, current_max_sequence
from services.validation_service import coerce_enum
from database import transactional, is_unique_violation

logger = logging.getLogger(__name__)

EVENT_ORDER_COLUMNS = ("game_events.game_id", "game_events.event_order")


class EventLedger:
    """事件紀錄管理器"""

    @staticmethod
    @transactional
    def append_event(
        db: Session,
        game_id: int,
        event_type,
        player_id: Optional[int] = None,
        checked_player_id: Optional[int] = None,
        result: Optional[str] = None
    ) -> int:
        """
        追加一筆事件

        流程：
        1. 驗證事件類型
        2. 確認相關玩家存在
        3. 鎖定 Game（同一場遊戲的追加會被序列化）
        4. 計算下一個 event_order
        5. 寫入事件

        參數：
            db: SQLAlchemy Session
            game_id: Game ID
            event_type: kill / vote / check_don / check_sheriff
            player_id: 被擊殺 / 被投出的玩家
            checked_player_id: 被查驗的玩家
            result: 查驗結果等自由文字

        返回：
            新事件的 event_order

        異常：
            ValidationError: 事件類型不合法
            GameNotFound: Game 不存在
            PlayerNotFound: player_id / checked_player_id 不存在
            ConcurrencyConflict: event_order 撞號（呼叫者可重試）
            StoreError: 其他資料庫錯誤（不可重試）
        """
        # 1. 驗證事件類型
        event_type = coerce_enum(EventType, event_type, "event_type")

        # 2. 相關玩家必須已註冊（只檢查存在，不檢查是否還在場）
        for pid in (player_id, checked_player_id):
            if pid is not None and db.get(Player, pid) is None:
                raise PlayerNotFound(pid)

        # 3. 鎖定 Game
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

        # 4. 下一個序號
        event_order = next_sequence(db, GameEvent.event_order, GameEvent.game_id, game_id)

        # 5. 寫入
        event = GameEvent(
            game_id=game_id,
            event_type=event_type,
            player_id=player_id,
            checked_player_id=checked_player_id,
            result=result,
            event_order=event_order
        )
        db.add(event)
        try:
            db.flush()
        except IntegrityError as e:
            if not is_unique_violation(e, "uq_game_events_order", EVENT_ORDER_COLUMNS):
                raise
            raise ConcurrencyConflict(
                f"Event order {event_order} already taken in game {game_id}"
            ) from e

        logger.info(
            f"Game {game_id}: appended {event_type.value} event #{event_order} "
            f"(player={player_id}, checked={checked_player_id}, result={result!r})"
        )
        return event_order

    @staticmethod
    @transactional
    def delete_last_event(db: Session, game_id: int) -> int:
        """
        撤銷最後一筆事件

        只刪除 event_order 等於目前最大值的事件；沒有事件時什麼都不做（不是錯誤）

        返回：
            刪除的筆數（0 或 1）

        異常：
            GameNotFound: Game 不存在
        """
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

        last_order = current_max_sequence(db, GameEvent.event_order, GameEvent.game_id, game_id)
        if last_order is None:
            logger.info(f"Game {game_id}: no events to undo")
            return 0

        deleted = db.query(GameEvent).filter(
            GameEvent.game_id == game_id,
            GameEvent.event_order == last_order
        ).delete(synchronize_session=False)

        logger.info(f"Game {game_id}: undid event #{last_order}")
        return deleted

    @staticmethod
    def list_events(db: Session, game_id: int) -> List[GameEvent]:
        """依 event_order 列出某場遊戲的事件"""
        return db.query(GameEvent).filter(
            GameEvent.game_id == game_id
        ).order_by(GameEvent.event_order).all()
