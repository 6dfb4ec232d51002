"""
驗證服務：在寫入資料庫之前檢查輸入

純計算邏輯，不碰資料庫；失敗一律拋 ValidationError，不會有任何寫入
"""
from typing import List, Sequence

from core.exceptions import ValidationError
from models import SEATS_PER_GAME


def validate_roster(player_ids: Sequence[int]) -> List[int]:
    """
    檢查開局名單：必須剛好 10 位且不重複

    參數：
        player_ids: 依座位順序排列的玩家 ID（index 0 → 1 號位）

    返回：
        list 形式的玩家 ID（保留順序）

    異常：
        ValidationError: 數量不是 10，或有重複的玩家
    """
    if player_ids is None:
        raise ValidationError(f"Exactly {SEATS_PER_GAME} players required, got none")

    ids = list(player_ids)
    if len(ids) != SEATS_PER_GAME:
        raise ValidationError(
            f"Exactly {SEATS_PER_GAME} players required, got {len(ids)}"
        )

    if len(set(ids)) != len(ids):
        duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
        raise ValidationError(f"Duplicate players in roster: {duplicates}")

    return ids


def coerce_enum(enum_cls, value, field: str):
    """
    把字串轉成 enum 成員（已經是成員就原樣返回）

    範例：
        coerce_enum(SeatStatus, "eliminated", "status") -> SeatStatus.ELIMINATED
        coerce_enum(SeatStatus, "dead", "status")       -> ValidationError
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field} {value!r}, expected one of: {allowed}")
