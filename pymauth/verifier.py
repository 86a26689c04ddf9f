"""
身份验证：用双线性配对检查证书。

e(ζx, g) = e(b1*x, g) = e(x, g)^b1 = e(x, b1*g) = e(x, h1)，ζy 同理。
在非对称曲线上 g、h1、h2 的一侧取其 G2 镜像 ĝ、ĥ1、ĥ2：
    e(ĝ, ζx) == e(ĥ1, x)  且  e(ĝ, ζy) == e(ĥ2, y)
"""
from pymauth.common.datastructures import Certificate, Pseudonym, PublicParameters
from pymauth.common.result import Outcome
from pymauth.crypto import G1Element, G2Element, PairingGroup
from pymauth.errors import CertificateVerificationFailure
from pymauth.utils import log_msg


def verify(group: PairingGroup, x: G1Element, y: G1Element, zeta_x: G1Element, zeta_y: G1Element,
           h1_hat: G2Element, h2_hat: G2Element, g_hat: G2Element) -> bool:
    # 任一单位元都会使两侧配对都等于 1
    if any(group.is_identity(p) for p in (x, y, zeta_x, zeta_y, h1_hat, h2_hat, g_hat)):
        return False
    if group.pair(g_hat, zeta_x) != group.pair(h1_hat, x):
        return False
    return group.pair(g_hat, zeta_y) == group.pair(h2_hat, y)


class Verifier:
    """只持有公开参数的验证者。失败是终态，不重试。"""

    def __init__(self, group: PairingGroup, public: PublicParameters):
        self.group = group
        self.public = public

    def verify(self, pseudonym: Pseudonym, certificate: Certificate) -> bool:
        p = self.public
        return verify(self.group, pseudonym.x, pseudonym.y, certificate.zeta_x, certificate.zeta_y,
                      p.h1_hat, p.h2_hat, p.params.g_hat)

    def check(self, pseudonym: Pseudonym, certificate: Certificate) -> Outcome[Pseudonym]:
        if self.verify(pseudonym, certificate):
            log_msg("INFO", "VERIFIER", None, "身份验证成功")
            return Outcome.success(pseudonym)
        log_msg("WARN", "VERIFIER", None, "身份验证失败：配对方程不成立")
        return Outcome.failure(CertificateVerificationFailure("证书的配对方程不成立"))
