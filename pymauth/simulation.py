"""
参考流程驱动

依次执行：系统初始化 -> 设备注册 -> 假名生成 -> 证书签发 -> 身份验证，
记录每个阶段的耗时（微秒），在第一个失败的关卡处停止。
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pymauth.config import AuthConfig
from pymauth.crypto import PairingGroup, RandomSource
from pymauth.errors import ProtocolError
from pymauth.protocol import PseudonymProtocol
from pymauth.registry import DeviceRegistry
from pymauth.roles.base_station import BaseStation, ParameterAuthority
from pymauth.roles.device import Device
from pymauth.storage.registry_store import InMemoryCommitmentStore
from pymauth.utils import init_logging, log_msg, stage_timer
from pymauth.verifier import Verifier

STAGES = ("setup", "registration", "pseudonym", "certificate", "verification")


@dataclass
class AuthRunReport:
    """一次完整流程的结果与各阶段耗时。"""
    timings: Dict[str, int] = field(default_factory=dict)
    commitment_hex: str = ""
    pseudonym_valid: bool = False
    verified: bool = False
    failed_stage: Optional[str] = None
    error: Optional[str] = None

    @property
    def total_us(self) -> int:
        return sum(self.timings.values())

    @property
    def succeeded(self) -> bool:
        return self.verified and self.failed_stage is None


def element_to_hex(group: PairingGroup, element) -> str:
    """G1 或 G2 元素的十六进制表示（调试用）。"""
    if hasattr(element[0], "coeffs"):
        return group.serialize_g2(element).hex()
    return group.serialize_g1(element).hex()


def run_authentication_flow(config: AuthConfig, rng: Optional[RandomSource] = None) -> AuthRunReport:
    """执行一次参考流程。协议错误被记录在报告中而不是向外抛出。"""
    report = AuthRunReport()
    rng = rng or RandomSource(config.seed)
    timings = report.timings
    try:
        with stage_timer(timings, "setup"):
            context = ParameterAuthority.initialize(config.security_bits, config.curve, rng)

        with stage_timer(timings, "registration"):
            registry = DeviceRegistry(context, InMemoryCommitmentStore(), config.max_identity_length)
            identity, commitment = registry.register(config.device_id)
        report.commitment_hex = commitment.hex()

        base_station = BaseStation(context)
        device = Device(context, identity)
        with stage_timer(timings, "pseudonym"):
            outcome = PseudonymProtocol(base_station, device).run()
        report.pseudonym_valid = outcome.ok
        verified = outcome.unwrap()
        log_msg("DEBUG", "FLOW", None, f"x={element_to_hex(context.group, verified.pseudonym.x)}")

        with stage_timer(timings, "certificate"):
            certificate = base_station.issue_certificate(verified)

        with stage_timer(timings, "verification"):
            result = Verifier(context.group, context.public).check(verified.pseudonym, certificate)
        report.verified = result.ok
        result.unwrap()
    except ProtocolError as e:
        report.failed_stage = e.stage
        report.error = str(e)
        log_msg("ERROR", "FLOW", None, f"流程在阶段 {e.stage} 失败: {e.message}")
        return report

    for stage in STAGES:
        log_msg("INFO", "FLOW", None, f"{stage} 耗时: {timings[stage]} 微秒")
    log_msg("INFO", "FLOW", None, f"总耗时: {report.total_us} 微秒")
    return report


def run_benchmark(config: AuthConfig) -> List[AuthRunReport]:
    """按 config.iterations 重复执行流程；共享同一个随机源，保证每轮取到新的随机数。"""
    init_logging(log_file=config.log_file, level=config.log_level, console=config.console_log)
    log_msg("INFO", "FLOW", None, f"正在使用配置启动: {config}")
    rng = RandomSource(config.seed)
    reports: List[AuthRunReport] = []
    for _ in range(max(1, config.iterations)):
        report = run_authentication_flow(config, rng)
        reports.append(report)
        if not report.succeeded:
            break
    return reports
