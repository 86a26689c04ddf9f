from pymauth.common.datastructures import (
    DeviceIdentity,
    PseudonymChallenge,
    PseudonymResponse,
    SystemContext,
)
from pymauth.errors import DegenerateProofInputError
from pymauth.protocol import compute_challenge, compute_response
from pymauth.utils import log_msg


class Device:
    """设备：持有私钥 d，应答基站的假名挑战。私钥从不离开本对象。"""

    def __init__(self, context: SystemContext, identity: DeviceIdentity):
        self.group = context.group
        self.public = context.public
        self.rng = context.rng
        self.identity = identity

    @property
    def device_id(self) -> str:
        return self.identity.id.decode("utf-8", errors="replace")

    def respond(self, challenge: PseudonymChallenge) -> PseudonymResponse:
        """
        计算 y = d*x，并生成证明 (Y, Z)。

        δ 在每次调用中重新采样，绝不复用。
        """
        group = self.group
        x = challenge.x
        if group.is_identity(x):
            log_msg("ERROR", "DEVICE", self.device_id, "收到的 x 为单位元，拒绝应答")
            raise DegenerateProofInputError("挑战 x 为单位元")

        d = self.identity.private_key
        y = group.mul(x, d)
        delta = group.random_scalar(self.rng)
        Y = group.mul(x, delta)
        epsilon = compute_challenge(group, x, y, Y)
        Z = compute_response(group, delta, epsilon, d)
        log_msg("DEBUG", "DEVICE", self.device_id, "已生成假名 y 与 Schnorr 证明")
        return PseudonymResponse(y=y, commitment=Y, response=Z)
