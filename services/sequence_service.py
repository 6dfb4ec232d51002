"""
序號服務：計算每場遊戲的下一個序號

event_order（事件順序）和 exit_order（出局順序）共用同一套規則：
讀目前最大值，沒有資料視為 0，回傳 max + 1。

純計算邏輯；序列化由呼叫者負責（先 with_game_lock，再呼叫這裡）
"""
from sqlalchemy import func
from sqlalchemy.orm import Session


def next_sequence(db: Session, column, scope_column, scope_value) -> int:
    """
    回傳 scope 內 column 的下一個序號

    參數：
        db: SQLAlchemy Session
        column: 序號欄位，例如 GameEvent.event_order
        scope_column: 範圍欄位，例如 GameEvent.game_id
        scope_value: 範圍值（game id）

    範例：
        next_sequence(db, GameEvent.event_order, GameEvent.game_id, 3)  # -> 1（沒有事件時）
    """
    current_max = current_max_sequence(db, column, scope_column, scope_value)
    return (current_max or 0) + 1


def current_max_sequence(db: Session, column, scope_column, scope_value):
    """Current max of the sequence column within scope, or None when empty."""
    return db.query(func.max(column)).filter(scope_column == scope_value).scalar()
