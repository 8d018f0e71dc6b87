from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB_PATH = ".data/sawasdee.sqlite3"
DEFAULT_STORAGE_KEY = "@sawasdee_spaced_repetition"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - environment: 実行環境（development/staging/production など）
    - srs_*: 復習スケジューラ（SM-2）の永続化・暦日・出題数に関する設定
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for stdlib logging / 標準 logging のログレベル",
    )

    # --- SRS（復習）の永続化設定 ---
    srs_store_backend: Literal["sqlite", "memory"] = Field(
        default="sqlite",
        description="Persistent store backend / 永続化バックエンド（sqlite または memory）",
    )
    srs_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to SRS SQLite database / SRS用SQLite DBパス",
    )
    srs_storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Key of the persisted scheduler blob / スケジューラ状態を保存するキー",
    )

    # --- 出題・暦日 ---
    srs_timezone: str = Field(
        default="UTC",
        description="IANA timezone for calendar-day streaks / 連続学習日数を判定する暦日のタイムゾーン",
    )
    srs_max_due: int = Field(
        default=20,
        ge=0,
        description="Max due items returned by the review endpoint / 復習エンドポイントの最大出題数",
    )
    srs_new_items_default: int = Field(
        default=5,
        ge=0,
        description="Default number of new items to introduce / 新出語の既定件数",
    )

    # --- エラー方針 ---
    srs_strict_item_ids: bool = Field(
        default=False,
        description="Reject item ids unknown to the catalog / カタログに無い ID を拒否する",
    )
    srs_raise_on_write_error: bool = Field(
        default=False,
        description="Surface storage write failures to callers / 保存失敗を呼び出し元へ送出する",
    )

    # - env_file: .env を読み込む
    # - extra: 未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("srs_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        name = (value or "").strip()
        if not name:
            raise ValueError("SRS_TIMEZONE must not be empty")
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"SRS_TIMEZONE is not a known timezone: {name}") from exc
        return name

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.srs_timezone)


settings = Settings()
