"""
假名生成：非交互 Schnorr 知识证明（Fiat-Shamir 变换）

交互流程被压缩为单次传递：
  1. 基站选 γ，发送 x = γ*g；
  2. 设备计算 y = d*x；
  3. 设备选新的 δ，计算承诺 Y = δ*x；
  4. 双方独立计算挑战 ε = H(x || y || Y)，挑战不由证明者选择；
  5. 设备计算响应 Z = δ + ε*d (mod q)；
  6. 基站检查 Z*x == Y + ε*y。

安全不变量：γ 与 δ 每次调用都必须重新从安全随机源采样。
复用或可预测的 δ 会泄露 d，复用 γ 会使不同会话的假名可链接。
"""
from pymauth.common.datastructures import (
    Pseudonym,
    ProofTranscript,
    VerifiedPseudonym,
)
from pymauth.common.result import Outcome
from pymauth.crypto import G1Element, PairingGroup, Scalar


def transcript_bytes(group: PairingGroup, x: G1Element, y: G1Element, Y: G1Element) -> bytes:
    """serialize(x) || serialize(y) || serialize(Y)"""
    return group.serialize_g1(x) + group.serialize_g1(y) + group.serialize_g1(Y)


def challenge_from_bytes(group: PairingGroup, data: bytes) -> Scalar:
    return group.hash_to_scalar(data)


def compute_challenge(group: PairingGroup, x: G1Element, y: G1Element, Y: G1Element) -> Scalar:
    """ε = H(x || y || Y)，对相同输入逐位确定。"""
    return challenge_from_bytes(group, transcript_bytes(group, x, y, Y))


def compute_response(group: PairingGroup, delta: Scalar, epsilon: Scalar, d: Scalar) -> Scalar:
    """Z = δ + ε*d (mod q)"""
    return group.scalar_add(delta, group.scalar_mul(epsilon, d))


def check_proof_equation(group: PairingGroup, x: G1Element, y: G1Element,
                         Y: G1Element, Z: Scalar, epsilon: Scalar) -> bool:
    """Z*x == Y + ε*y"""
    left = group.mul(x, Z)
    right = group.add(Y, group.mul(y, epsilon))
    return group.eq(left, right)


def verify_transcript(group: PairingGroup, pseudonym: Pseudonym, transcript: ProofTranscript) -> bool:
    """重新计算挑战并检查证明方程。"""
    if group.is_identity(pseudonym.x) or group.is_identity(pseudonym.y):
        return False
    epsilon = compute_challenge(group, pseudonym.x, pseudonym.y, transcript.commitment)
    if epsilon != transcript.challenge:
        return False
    return check_proof_equation(group, pseudonym.x, pseudonym.y,
                                transcript.commitment, transcript.response, epsilon)


class PseudonymProtocol:
    """
    在基站与设备之间执行一次假名生成。

    返回 Outcome[VerifiedPseudonym]：失败时不得继续签发证书。
    """

    def __init__(self, base_station, device):
        self.base_station = base_station
        self.device = device

    def run(self) -> Outcome[VerifiedPseudonym]:
        challenge = self.base_station.issue_challenge()
        response = self.device.respond(challenge)
        return self.base_station.verify_response(challenge, response)
