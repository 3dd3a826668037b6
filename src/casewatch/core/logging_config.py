"""structlog 配置模块 -- CLI 与定时任务共用

案件列表和变更摘要由 CLI 打印到 stdout，日志一律写 stderr，
定时任务重定向 stdout 时不会混入日志。

CASEWATCH_LOG_FORMAT:
- "dev" (默认): 终端可读输出
- "json": 每行一个 JSON 对象，供 cron 日志采集
"""

import logging
import os
import sys

import structlog


def setup_logging() -> None:
    """初始化 structlog，CLI 入口调用一次；重复调用会替换已有 handler

    structlog 事件与 aiosqlite / httpx 的标准库日志经同一个
    ProcessorFormatter 渲染，两者格式一致。
    """
    log_format = os.environ.get("CASEWATCH_LOG_FORMAT", "dev")
    log_level = os.environ.get("CASEWATCH_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        # 中文错误信息原样输出
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # 每条 SQL / 每个请求都会记 debug 日志
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
