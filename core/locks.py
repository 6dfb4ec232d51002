"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 PostgreSQL 的 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）。
SQLite 會忽略 FOR UPDATE，此時由 unique constraint 擋下重複序號。
"""
from sqlalchemy.orm import Session, Query

from models import Game, GameStatus


def with_game_lock(game_id: int, db: Session) -> Query:
    """
    鎖定一場 Game（行級鎖）

    使用場景：
    - 計算下一個 event_order / exit_order 時
    - 需要確保「讀 max → 寫 max+1」在同一場遊戲上被序列化

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)
        order = next_sequence(db, GameEvent.event_order, GameEvent.game_id, game_id)

    參數：
        game_id: Game ID
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
        - 不同遊戲之間互不影響
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def lock_active_games(db: Session) -> Query:
    """
    鎖定所有 status = active 的 Game

    使用場景：
    - 建立新遊戲前，把舊的 active 遊戲改成 finished

    返回：
        Query object（呼叫 .all() 取得所有結果）
    """
    return db.query(Game).filter(
        Game.status == GameStatus.ACTIVE
    ).with_for_update(nowait=False)
