"""协议错误分类。每个错误都记录失败发生的阶段，便于审计。"""


class ProtocolError(Exception):
    """所有协议错误的基类。"""

    default_stage = "protocol"

    def __init__(self, message: str, stage: str = None):
        self.stage = stage or self.default_stage
        self.message = message
        super().__init__(f"[{self.stage}] {message}")


class ParameterGenerationError(ProtocolError):
    """曲线/群参数无法满足请求的安全位数。"""
    default_stage = "setup"


class HashInputError(ProtocolError):
    """身份或其他待哈希/反序列化输入格式错误或越界。"""
    default_stage = "registration"


class DuplicateRegistrationError(ProtocolError):
    """同一身份在注册表中已有承诺。"""
    default_stage = "registration"


class DegenerateProofInputError(ProtocolError):
    """采样的标量或派生的点退化为单位元。不会自动重试。"""
    default_stage = "pseudonym"


class ProofVerificationFailure(ProtocolError):
    """Schnorr 方程 Z*x = Y + ε*y 不成立。"""
    default_stage = "pseudonym"


class CertificateVerificationFailure(ProtocolError):
    """证书的配对方程不成立。"""
    default_stage = "verification"
