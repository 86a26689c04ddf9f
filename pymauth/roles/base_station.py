from typing import Optional

from pymauth.common.datastructures import (
    BaseStationKeyPair,
    Certificate,
    Pseudonym,
    PseudonymChallenge,
    PseudonymResponse,
    ProofTranscript,
    SystemContext,
    SystemParameters,
    VerifiedPseudonym,
    mark_verified,
)
from pymauth.common.result import Outcome
from pymauth.crypto import PairingGroup, RandomSource
from pymauth.errors import DegenerateProofInputError, ParameterGenerationError, ProofVerificationFailure
from pymauth.protocol import check_proof_equation, compute_challenge, verify_transcript
from pymauth.utils import fingerprint, log_msg


class ParameterAuthority:
    """生成系统参数与基站的两组密钥。一次性执行，不重试。"""

    @staticmethod
    def initialize(security_bits: int = 128, curve: Optional[str] = None,
                   rng: Optional[RandomSource] = None) -> SystemContext:
        """
        选择曲线族，采样 g、ĝ，以及 b1、b2，计算 h_i = b_i*g。

        :param security_bits: 群阶的最小位长。
        :param curve: 指定曲线族名称，默认自动选择。
        :param rng: 随机源；给定种子时整个初始化是确定性的。
        :raises ParameterGenerationError: 无法满足安全位数。
        """
        rng = rng or RandomSource()
        try:
            group = PairingGroup.for_security(security_bits, curve)
        except ParameterGenerationError as e:
            log_msg("ERROR", "SETUP", None, f"参数生成失败: {e.message}")
            raise

        g = group.random_g1(rng)
        g_hat = group.random_g2(rng)
        params = SystemParameters(curve=group.name, order=group.order, g=g, g_hat=g_hat)

        b1 = group.random_scalar(rng)
        b2 = group.random_scalar(rng)
        key1 = BaseStationKeyPair.derive(group, params, b1)
        key2 = BaseStationKeyPair.derive(group, params, b2)

        log_msg("INFO", "SETUP", None,
                f"系统初始化完成：曲线 {group.name}，群阶 {group.order.bit_length()} 位"
                f"{'（确定性随机源）' if rng.deterministic else ''}")
        log_msg("DEBUG", "SETUP", None,
                f"g={fingerprint(group.serialize_g1(g))} h1={fingerprint(group.serialize_g1(key1.public_key))} "
                f"h2={fingerprint(group.serialize_g1(key2.public_key))}")
        return SystemContext(group=group, params=params, key1=key1, key2=key2, rng=rng)


class CertificateAuthority:
    """用基站私钥 b1、b2 为已验证的假名签发证书。"""

    def __init__(self, context: SystemContext):
        self.context = context

    def issue(self, verified: VerifiedPseudonym) -> Certificate:
        """
        ζx = b1*x，ζy = b2*y。确定性，无随机性。

        只接受 VerifiedPseudonym，并在签发前再次检查其证明。
        """
        if not isinstance(verified, VerifiedPseudonym):
            raise TypeError(f"只能为已验证的假名签发证书，收到 {type(verified).__name__}")
        group = self.context.group
        if not verify_transcript(group, verified.pseudonym, verified.transcript):
            log_msg("ERROR", "CA", None, "签发前复核证明失败，拒绝签发")
            raise ProofVerificationFailure("假名证明复核失败，拒绝签发证书", stage="certificate")

        x, y = verified.pseudonym.x, verified.pseudonym.y
        cert = Certificate(
            zeta_x=group.mul(x, self.context.key1.private_key),
            zeta_y=group.mul(y, self.context.key2.private_key),
        )
        log_msg("INFO", "CA", None, f"证书签发完成，假名 x={fingerprint(group.serialize_g1(x))}")
        return cert


class BaseStation:
    """
    基站：发出假名挑战、验证设备的 Schnorr 证明并签发证书。
    """

    def __init__(self, context: SystemContext, station_id: str = "B0"):
        self.context = context
        self.station_id = station_id
        self.ca = CertificateAuthority(context)

    def issue_challenge(self) -> PseudonymChallenge:
        """采样新的 γ，发送 x = γ*g。γ 不保留。"""
        group = self.context.group
        gamma = group.random_scalar(self.context.rng)
        x = group.mul(self.context.params.g, gamma)
        if group.is_identity(x):
            log_msg("ERROR", "BASE", self.station_id, "x 退化为单位元，放弃本次尝试")
            raise DegenerateProofInputError("x 退化为单位元")
        return PseudonymChallenge(x=x)

    def verify_response(self, challenge: PseudonymChallenge,
                        response: PseudonymResponse) -> Outcome[VerifiedPseudonym]:
        """独立计算 ε 并检查 Z*x == Y + ε*y。"""
        group = self.context.group
        x, y = challenge.x, response.y
        if group.is_identity(x) or group.is_identity(y):
            log_msg("ERROR", "BASE", self.station_id, "假名包含单位元，放弃本次尝试")
            raise DegenerateProofInputError("假名 (x, y) 包含单位元")

        epsilon = compute_challenge(group, x, y, response.commitment)
        if not check_proof_equation(group, x, y, response.commitment, response.response, epsilon):
            log_msg("WARN", "BASE", self.station_id, "假名生成失败：Schnorr 方程不成立")
            return Outcome.failure(ProofVerificationFailure("Schnorr 方程 Z*x = Y + ε*y 不成立"))

        pseudonym = Pseudonym(x=x, y=y)
        transcript = ProofTranscript(commitment=response.commitment, response=response.response,
                                     challenge=epsilon)
        log_msg("INFO", "BASE", self.station_id, "假名生成成功，已得到假名 (x, y)")
        return Outcome.success(mark_verified(pseudonym, transcript))

    def issue_certificate(self, verified: VerifiedPseudonym) -> Certificate:
        return self.ca.issue(verified)
