"""
資料模型

四張核心表：players, games, game_players, game_events
（外加只被 games 參照的 tournaments）

不變量（在儲存層強制）：
- 同一時間最多一場 status = active 的遊戲（partial unique index）
- 每場遊戲的座位 1..10 不重複
- 每場遊戲的 event_order、exit_order 不重複
"""
import enum

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint, Index, Enum, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base

SEATS_PER_GAME = 10


class GameStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    FINISHED = "finished"


class SeatStatus(str, enum.Enum):
    IN_GAME = "in_game"
    ELIMINATED = "eliminated"


class ExitType(str, enum.Enum):
    KILLED = "killed"
    VOTED = "voted"
    REMOVED = "removed"


class EventType(str, enum.Enum):
    KILL = "kill"
    VOTE = "vote"
    CHECK_DON = "check_don"
    CHECK_SHERIFF = "check_sheriff"


def _enum_column(enum_cls, **kwargs):
    # 以 value（小寫字串）存進資料庫，不使用 native enum
    return Column(
        Enum(
            enum_cls,
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        **kwargs
    )


class Player(Base):
    """玩家（跨遊戲的身分紀錄）"""
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(64), unique=True, nullable=True, index=True)
    nickname = Column(String(100), nullable=False)
    photo_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Tournament(Base):
    """賽事，只被 games 參照"""
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(64), unique=True, nullable=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Game(Base):
    """一場遊戲（session）"""
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=True, index=True)
    external_id = Column(String(64), unique=True, nullable=True)
    game_number = Column(Integer, nullable=False)
    status = _enum_column(GameStatus, nullable=False, default=GameStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tournament = relationship("Tournament")
    seats = relationship(
        "GamePlayer",
        back_populates="game",
        order_by="GamePlayer.position"
    )
    events = relationship(
        "GameEvent",
        back_populates="game",
        order_by="GameEvent.event_order"
    )

    __table_args__ = (
        Index(
            "uq_games_single_active",
            "status",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )


class GamePlayer(Base):
    """座位：玩家在某場遊戲中的參與紀錄"""
    __tablename__ = "game_players"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    role = Column(String(50), nullable=True)  # mafia, don, sheriff, civilian... 不驗證
    status = _enum_column(SeatStatus, nullable=False, default=SeatStatus.IN_GAME)
    exit_type = _enum_column(ExitType, nullable=True)
    exit_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    game = relationship("Game", back_populates="seats")
    player = relationship("Player")

    __table_args__ = (
        CheckConstraint(
            f"position >= 1 AND position <= {SEATS_PER_GAME}",
            name="ck_game_players_position_range"
        ),
        UniqueConstraint("game_id", "position", name="uq_game_players_position"),
        UniqueConstraint("game_id", "player_id", name="uq_game_players_player"),
        UniqueConstraint("game_id", "exit_order", name="uq_game_players_exit_order"),
    )


class GameEvent(Base):
    """遊戲事件：擊殺、投票、警長 / 教父查驗"""
    __tablename__ = "game_events"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    event_type = _enum_column(EventType, nullable=False)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    checked_player_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    event_order = Column(Integer, nullable=False)
    result = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    game = relationship("Game", back_populates="events")
    player = relationship("Player", foreign_keys=[player_id])
    checked_player = relationship("Player", foreign_keys=[checked_player_id])

    __table_args__ = (
        UniqueConstraint("game_id", "event_order", name="uq_game_events_order"),
    )
