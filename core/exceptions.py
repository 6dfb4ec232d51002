"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理：
- ValidationError → 400
- NotFound 家族 → 404
- ConcurrencyConflict → 409（重試後仍失敗）
- StoreError → 500
"""


class MafiaOverlayException(Exception):
    """所有遊戲異常的基類"""
    pass


class ValidationError(MafiaOverlayException):
    """輸入資料不合法（玩家數量、重複玩家、未知狀態等），不會做任何寫入"""
    pass


# ============ 查無資料 ============

class NotFound(MafiaOverlayException):
    """查詢的資料不存在"""
    pass


class GameNotFound(NotFound):
    """遊戲不存在"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


class NoActiveGame(NotFound):
    """目前沒有進行中的遊戲"""
    def __init__(self):
        super().__init__("No active game")


class PlayerNotFound(NotFound):
    """玩家不存在"""
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class SeatNotFound(NotFound):
    """玩家沒有坐在這場遊戲裡"""
    def __init__(self, game_id, player_id):
        self.game_id = game_id
        self.player_id = player_id
        super().__init__(f"Player {player_id} is not seated in game {game_id}")


class TournamentNotFound(NotFound):
    """賽事不存在"""
    def __init__(self, tournament_id):
        self.tournament_id = tournament_id
        super().__init__(f"Tournament {tournament_id} not found")


# ============ 儲存層 ============

class StoreError(MafiaOverlayException):
    """資料庫層失敗（I/O、constraint violation、transaction conflict）"""
    pass


class ConcurrencyConflict(StoreError):
    """並發寫入撞到 unique constraint（序號重複、同時有兩場 active 遊戲）"""
    pass
