"""
Game Manager：管理遊戲（session）的完整生命週期

職責：
1. 開新局（結束舊的 active 遊戲 + 安排 10 個座位）
2. 查詢目前進行中的遊戲（含座位與事件）
3. 設定座位角色
4. 設定座位狀態（出局時蓋上出局順序）

原則：
- 同一時間最多一場 active 遊戲：「結束舊局」和「建立新局」在同一個 transaction
- 目前的遊戲永遠用查詢取得（status = active），不快取
- 角色不做規則驗證（不檢查是否剛好一位教父 / 警長）
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from models import (
    Game, GamePlayer, GameStatus, Player, SeatStatus, ExitType, Tournament
)
from core.locks import with_game_lock, lock_active_games
from core.exceptions import (
    ConcurrencyConflict,
    GameNotFound,
    NoActiveGame,
    PlayerNotFound,
    SeatNotFound,
    TournamentNotFound
)
from services.game_view_service import build_game_view
from services.sequence_service import next_sequence
from services.validation_service import validate_roster, coerce_enum
from database import transactional, is_unique_violation

logger = logging.getLogger(__name__)

SINGLE_ACTIVE_COLUMNS = ("games.status",)
EXIT_ORDER_COLUMNS = ("game_players.game_id", "game_players.exit_order")


class GameManager:
    """Game 生命週期管理器"""

    @staticmethod
    @transactional
    def create_game(
        db: Session,
        game_number: int,
        player_ids: List[int],
        tournament_id: Optional[int] = None
    ) -> Game:
        """
        開新局

        流程：
        1. 驗證名單（10 位、不重複、都已註冊）
        2. 鎖定並結束所有 active 遊戲
        3. 建立新的 active 遊戲
        4. 依名單順序安排座位 1..10

        參數：
            db: SQLAlchemy Session
            game_number: 場次編號（由主持人決定，可重複）
            player_ids: 依座位順序的 10 位玩家 ID
            tournament_id: 所屬賽事（可省略）

        返回：
            新建立的 Game

        異常：
            ValidationError: 名單不合法（不會做任何寫入）
            PlayerNotFound: 名單中有未註冊的玩家
            TournamentNotFound: 賽事不存在
            ConcurrencyConflict: 同時有另一個請求也在開新局
        """
        # 1. 驗證名單
        roster = validate_roster(player_ids)

        if tournament_id is not None and db.get(Tournament, tournament_id) is None:
            raise TournamentNotFound(tournament_id)

        known_ids = {
            pid for (pid,) in db.query(Player.id).filter(Player.id.in_(roster)).all()
        }
        for pid in roster:
            if pid not in known_ids:
                raise PlayerNotFound(pid)

        # 2. 結束舊局（先 flush，才不會撞到 single-active index）
        previous = lock_active_games(db).all()
        for old_game in previous:
            old_game.status = GameStatus.FINISHED
            logger.info(f"Finishing game {old_game.id} (game_number={old_game.game_number})")
        db.flush()

        # 3. 建立新局
        game = Game(
            game_number=game_number,
            tournament_id=tournament_id,
            status=GameStatus.ACTIVE
        )
        db.add(game)
        try:
            db.flush()  # 取得 game.id
        except IntegrityError as e:
            if not is_unique_violation(e, "uq_games_single_active", SINGLE_ACTIVE_COLUMNS):
                raise
            raise ConcurrencyConflict("Another game was activated concurrently") from e

        # 4. 安排座位
        for index, player_id in enumerate(roster):
            db.add(GamePlayer(
                game_id=game.id,
                player_id=player_id,
                position=index + 1,
                status=SeatStatus.IN_GAME
            ))
        db.flush()

        logger.info(
            f"Created game {game.id} (game_number={game_number}) "
            f"with players {roster}, finished {len(previous)} previous game(s)"
        )

        # transactional decorator 會自動 commit
        return game

    @staticmethod
    def get_active_game(db: Session) -> Dict[str, Any]:
        """
        取得目前進行中的遊戲（含座位與事件）

        有多筆 active 時（理論上不會發生）取最新建立的那一筆

        返回：
            {"game": ..., "players": [...], "events": [...]}

        異常：
            NoActiveGame: 沒有進行中的遊戲
        """
        game = db.query(Game).filter(
            Game.status == GameStatus.ACTIVE
        ).order_by(Game.created_at.desc(), Game.id.desc()).first()

        if not game:
            raise NoActiveGame()

        return build_game_view(game, db)

    @staticmethod
    def get_game_by_id(db: Session, game_id: int) -> Game:
        """
        透過 ID 取得 Game

        異常：
            GameNotFound: Game 不存在
        """
        game = db.query(Game).filter(Game.id == game_id).first()
        if not game:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def get_game_view(db: Session, game_id: int) -> Dict[str, Any]:
        """任一場遊戲的完整狀態（格式同 get_active_game）"""
        game = GameManager.get_game_by_id(db, game_id)
        return build_game_view(game, db)

    @staticmethod
    def get_seat(db: Session, game_id: int, player_id: int) -> GamePlayer:
        """
        取得玩家在某場遊戲中的座位

        異常：
            SeatNotFound: 玩家不在這場遊戲裡
        """
        seat = db.query(GamePlayer).filter(
            GamePlayer.game_id == game_id,
            GamePlayer.player_id == player_id
        ).first()
        if not seat:
            raise SeatNotFound(game_id, player_id)
        return seat

    @staticmethod
    @transactional
    def set_seat_role(
        db: Session,
        game_id: int,
        player_id: int,
        role: Optional[str]
    ) -> GamePlayer:
        """
        設定座位角色（覆寫，冪等）

        任何字串都接受（mafia / don / sheriff / civilian / None ...），
        不檢查整局的角色組成
        """
        GameManager.get_game_by_id(db, game_id)
        seat = GameManager.get_seat(db, game_id, player_id)
        seat.role = role

        logger.info(f"Game {game_id}: player {player_id} role set to {role!r}")
        return seat

    @staticmethod
    @transactional
    def set_seat_status(
        db: Session,
        game_id: int,
        player_id: int,
        status,
        exit_type=None
    ) -> Optional[int]:
        """
        設定座位狀態

        規則：
        - eliminated：座位還沒有出局順序時，蓋上 max(exit_order) + 1；
          已經有出局順序的座位保留原本的號碼（不重新分配），只更新 exit_type
        - in_game：只改狀態，出局欄位不動（沒有「復活」回滾語意）

        參數：
            db: SQLAlchemy Session
            game_id: Game ID
            player_id: Player ID
            status: "in_game" / "eliminated"
            exit_type: "killed" / "voted" / "removed"（可省略）

        返回：
            座位的出局順序（in_game 且從未出局時為 None）

        異常：
            ValidationError: status / exit_type 不合法
            GameNotFound / SeatNotFound: 找不到遊戲或座位
            ConcurrencyConflict: 出局順序撞號
        """
        status = coerce_enum(SeatStatus, status, "status")
        if exit_type is not None:
            exit_type = coerce_enum(ExitType, exit_type, "exit_type")

        # 鎖定遊戲，序列化「讀 max → 寫 max+1」
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

        seat = GameManager.get_seat(db, game_id, player_id)

        if status == SeatStatus.IN_GAME:
            seat.status = SeatStatus.IN_GAME
            logger.info(f"Game {game_id}: player {player_id} back in game")
            return seat.exit_order

        if seat.exit_order is None:
            seat.exit_order = next_sequence(
                db, GamePlayer.exit_order, GamePlayer.game_id, game_id
            )
        seat.status = SeatStatus.ELIMINATED
        if exit_type is not None:
            seat.exit_type = exit_type

        try:
            db.flush()
        except IntegrityError as e:
            if not is_unique_violation(e, "uq_game_players_exit_order", EXIT_ORDER_COLUMNS):
                raise
            raise ConcurrencyConflict(
                f"Exit order collision in game {game_id}"
            ) from e

        logger.info(
            f"Game {game_id}: player {player_id} eliminated "
            f"({seat.exit_type.value if seat.exit_type else 'no reason'}), "
            f"exit_order={seat.exit_order}"
        )
        return seat.exit_order
