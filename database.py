from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import List
import logging
import time

from core.exceptions import StoreError, ConcurrencyConflict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./mafia_overlay.db"
    conflict_retries: int = 3
    conflict_retry_delay: float = 0.05
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()


def build_engine(database_url: str, **kwargs):
    """
    建立 SQLAlchemy Engine

    SQLite 需要 connect_args={"check_same_thread": False}，
    FastAPI 會在不同執行緒處理同一個連線池的請求
    """
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        **kwargs
    )


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保資料庫操作的原子性

    使用方式：
        @transactional
        def some_business_logic(db: Session, ...):
            game = Game(...)
            db.add(game)
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback
        - 業務異常原樣重新拋出
        - SQLAlchemy 的異常包成 StoreError 再拋出（保留 __cause__）

    注意：
        - 第一個參數必須是 db: Session
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 db session（可能在 args 或 kwargs）
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except SQLAlchemyError as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise StoreError(f"{func.__name__} failed: {e}") from e
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper


def is_unique_violation(error, constraint: str, columns) -> bool:
    """
    判斷 IntegrityError 是否來自某個 unique constraint / index

    只有這種情況才是「並發撞號」可以重試；外鍵、CHECK 等違規重試也不會成功

    參數：
        error: sqlalchemy.exc.IntegrityError
        constraint: constraint / index 名稱（PostgreSQL 會回報）
        columns: "table.column" 列表（SQLite 只回報欄位，不回報名稱）

    範例：
        is_unique_violation(e, "uq_game_events_order",
                            ["game_events.game_id", "game_events.event_order"])
    """
    orig = getattr(error, "orig", None)
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name == constraint

    message = str(orig if orig is not None else error)
    if constraint in message:
        return True
    # SQLite: "UNIQUE constraint failed: game_events.game_id, game_events.event_order"
    if "UNIQUE constraint failed" not in message:
        return False
    failed = {col.strip() for col in message.split(":", 1)[1].split(",")}
    return failed == set(columns)


def retry_on_conflict(func, *args, retries=None, delay=None, **kwargs):
    """
    呼叫一個 @transactional 操作，遇到 ConcurrencyConflict 時重試

    引擎本身不重試；這是給呼叫端（API 層）用的有限次重試。
    每次失敗時 transaction 已經被 rollback，所以可以安全地重新呼叫。

    參數：
        func: 要呼叫的函式（通常是 GameManager / EventLedger 的方法）
        retries: 最多重試次數，預設 settings.conflict_retries
        delay: 每次重試的等待秒數（線性遞增），預設 settings.conflict_retry_delay

    異常：
        ConcurrencyConflict: 重試次數用完仍然衝突
    """
    if retries is None:
        retries = settings.conflict_retries
    if delay is None:
        delay = settings.conflict_retry_delay

    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except ConcurrencyConflict as e:
            if attempt >= retries:
                logger.error(
                    "%s still conflicting after %d retries: %s",
                    func.__name__, retries, e
                )
                raise
            attempt += 1
            logger.warning(
                "%s conflicted (attempt %d/%d): %s. Retrying in %.2fs...",
                func.__name__, attempt, retries, e, delay * attempt
            )
            time.sleep(delay * attempt)
