"""
通用工具函数模块

- 摘要辅助：SHA-256 摘要与十六进制指纹。
- 日志：全局 "pymauth" 记录器的初始化与结构化日志输出。
- 计时：按阶段统计耗时（微秒）。
"""
import hashlib
import logging
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional


# ---------------------------- 摘要 ----------------------------

def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def fingerprint(data: bytes, n: int = 8) -> str:
    """公开值的短指纹，仅用于日志。"""
    return sha256_digest(data).hex()[:2 * n]


# ---------------------------- 计时 ----------------------------

@contextmanager
def stage_timer(timings: Dict[str, int], stage: str):
    """将 with 块的耗时（微秒）记入 timings[stage]，异常时同样记录。"""
    start = time.perf_counter_ns()
    try:
        yield
    finally:
        timings[stage] = (time.perf_counter_ns() - start) // 1000


# ---------------------------- 日志 ----------------------------

_LOG_INITIALIZED = False
_LOGGER = logging.getLogger("pymauth")


def init_logging(log_file: Optional[str] = None, level: str = "INFO", console: bool = True,
                 max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5):
    """配置 "pymauth" 记录器：可选的轮转文件输出与控制台输出。重复调用无效，需先 reset_logging。"""
    global _LOG_INITIALIZED
    if _LOG_INITIALIZED:
        return

    log_level = _to_logging_level(level)

    _LOGGER.setLevel(log_level)
    _LOGGER.propagate = False

    fmt = logging.Formatter(fmt="%(asctime)s %(levelname)-7s %(message)s", datefmt="%H:%M:%S")

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(fmt)
        _LOGGER.addHandler(fh)

    if console:
        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(fmt)
        _LOGGER.addHandler(ch)

    _LOG_INITIALIZED = True


def reset_logging():
    """移除所有处理器并允许重新初始化。"""
    global _LOG_INITIALIZED
    for handler in list(_LOGGER.handlers):
        _LOGGER.removeHandler(handler)
        handler.close()
    _LOG_INITIALIZED = False


def _to_logging_level(level: str) -> int:
    # 未知级别按 INFO 处理
    level = (level or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level, logging.INFO)


def log_msg(level: str, role: str, ident: Optional[str], msg: str):
    """以 "角色(标识): 消息" 的形式写日志；首次调用时按默认配置初始化。"""
    if not _LOG_INITIALIZED:
        init_logging()

    who = f"{role}({ident})" if ident else role
    _LOGGER.log(_to_logging_level(level), f"{who}: {msg}")
