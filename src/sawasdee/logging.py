import logging

import structlog
from structlog import contextvars as structlog_contextvars

from .config import settings


def configure_logging() -> None:
    """Configure structlog for application-wide logging.

    アプリ全体のロギング設定を行う。標準 logging を設定値のレベルで初期化し、
    structlog で ISO タイムスタンプと JSON 形式の出力を有効化する。
    リクエスト ID などの contextvars は全イベントへ自動で付与される。
    """
    # stdlib 側の出力に余計なプレフィックスを付けないため %(message)s に固定する。
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog_contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
