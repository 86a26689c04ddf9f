from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthConfig:
    """认证流程的配置参数"""
    security_bits: int = 128
    curve: Optional[str] = None
    max_identity_length: int = 256
    device_id: str = "Device123"
    seed: Optional[bytes] = None
    iterations: int = 1
    log_level: str = "INFO"
    log_file: Optional[str] = None
    console_log: bool = True
