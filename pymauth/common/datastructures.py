from dataclasses import dataclass, field

from pymauth.crypto import G1Element, G2Element, PairingGroup, RandomSource, Scalar
from pymauth.errors import HashInputError

# 只有 derive 持有该令牌，保证 h = b*g 不被绕过
_DERIVED = object()


@dataclass(frozen=True)
class SystemParameters:
    """系统公共参数：群阶 q、G1 生成元 g 及其 G2 镜像 ĝ。"""
    curve: str
    order: int
    g: G1Element
    g_hat: G2Element


@dataclass(frozen=True)
class BaseStationKeyPair:
    """基站密钥对 (b, h = b*g)，h_hat = b*ĝ 为 G2 镜像。只能通过 derive 构造。"""
    private_key: Scalar = field(repr=False)
    public_key: G1Element
    public_key_hat: G2Element
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._token is not _DERIVED:
            raise TypeError("BaseStationKeyPair 只能通过 derive 构造")

    @classmethod
    def derive(cls, group: PairingGroup, params: SystemParameters, b: Scalar) -> "BaseStationKeyPair":
        b = int(b) % group.order
        return cls(
            private_key=b,
            public_key=group.mul(params.g, b),
            public_key_hat=group.mul(params.g_hat, b),
            _token=_DERIVED,
        )

    def is_consistent(self, group: PairingGroup, params: SystemParameters) -> bool:
        return (group.eq(self.public_key, group.mul(params.g, self.private_key))
                and group.eq(self.public_key_hat, group.mul(params.g_hat, self.private_key)))


@dataclass(frozen=True)
class PublicParameters:
    """设备与验证者可见的全部公开值。"""
    params: SystemParameters
    h1: G1Element
    h2: G1Element
    h1_hat: G2Element
    h2_hat: G2Element

    def to_dict(self, group: PairingGroup) -> dict:
        return {
            "curve": self.params.curve,
            "g": group.serialize_g1(self.params.g).hex(),
            "g_hat": group.serialize_g2(self.params.g_hat).hex(),
            "h1": group.serialize_g1(self.h1).hex(),
            "h2": group.serialize_g1(self.h2).hex(),
            "h1_hat": group.serialize_g2(self.h1_hat).hex(),
            "h2_hat": group.serialize_g2(self.h2_hat).hex(),
        }

    @classmethod
    def from_dict(cls, group: PairingGroup, data: dict) -> "PublicParameters":
        params = SystemParameters(
            curve=data["curve"],
            order=group.order,
            g=group.deserialize_g1(bytes.fromhex(data["g"])),
            g_hat=group.deserialize_g2(bytes.fromhex(data["g_hat"])),
        )
        public = cls(
            params=params,
            h1=group.deserialize_g1(bytes.fromhex(data["h1"])),
            h2=group.deserialize_g1(bytes.fromhex(data["h2"])),
            h1_hat=group.deserialize_g2(bytes.fromhex(data["h1_hat"])),
            h2_hat=group.deserialize_g2(bytes.fromhex(data["h2_hat"])),
        )
        public.validate(group)
        return public

    def validate(self, group: PairingGroup) -> None:
        """
        拒绝单位元，并检查每个 G2 镜像与其 G1 公钥同指数：e(ĥ_i, g) == e(ĝ, h_i)。

        单位元会让配对两侧都等于 1，任意证书都能通过验证。
        """
        g, g_hat = self.params.g, self.params.g_hat
        points = (g, g_hat, self.h1, self.h2, self.h1_hat, self.h2_hat)
        if any(group.is_identity(p) for p in points):
            raise HashInputError("公开参数包含单位元", stage="setup")
        for h, h_hat in ((self.h1, self.h1_hat), (self.h2, self.h2_hat)):
            if group.pair(h_hat, g) != group.pair(g_hat, h):
                raise HashInputError("G2 镜像公钥与 G1 公钥不一致", stage="setup")


@dataclass(frozen=True)
class SystemContext:
    """
    一个基站的完整上下文，初始化后只读。

    取代全局的参数/配对/密钥变量；同一进程中可以存在多个互相独立的上下文。
    私钥只在基站侧使用，设备与验证者只应读取 public。
    """
    group: PairingGroup
    params: SystemParameters
    key1: BaseStationKeyPair
    key2: BaseStationKeyPair
    rng: RandomSource = field(repr=False, compare=False)

    @property
    def public(self) -> PublicParameters:
        return PublicParameters(
            params=self.params,
            h1=self.key1.public_key,
            h2=self.key2.public_key,
            h1_hat=self.key1.public_key_hat,
            h2_hat=self.key2.public_key_hat,
        )


@dataclass(frozen=True)
class DeviceIdentity:
    """设备身份。私钥 d 不参与序列化，dg = d*g 是唯一公开的产物。"""
    id: bytes
    private_key: Scalar = field(repr=False, compare=False)
    public_key: G1Element


@dataclass(frozen=True)
class RegistrationCommitment:
    """H(H(id) || dg)，定长摘要。"""
    id: bytes
    digest: bytes

    def hex(self) -> str:
        return self.digest.hex()


@dataclass(frozen=True)
class Pseudonym:
    """一次会话的假名 (x, y)，y = d*x。"""
    x: G1Element
    y: G1Element

    def to_dict(self, group: PairingGroup) -> dict:
        return {"x": group.serialize_g1(self.x).hex(), "y": group.serialize_g1(self.y).hex()}

    @classmethod
    def from_dict(cls, group: PairingGroup, data: dict) -> "Pseudonym":
        return cls(
            x=group.deserialize_g1(bytes.fromhex(data["x"])),
            y=group.deserialize_g1(bytes.fromhex(data["y"])),
        )


@dataclass(frozen=True)
class ProofTranscript:
    """非交互 Schnorr 证明 (Y, Z, ε)。"""
    commitment: G1Element  # Y = δ*x
    response: Scalar       # Z = δ + ε*d
    challenge: Scalar      # ε = H(x || y || Y)

    def to_dict(self, group: PairingGroup) -> dict:
        return {
            "Y": group.serialize_g1(self.commitment).hex(),
            "Z": group.serialize_scalar(self.response).hex(),
            "epsilon": group.serialize_scalar(self.challenge).hex(),
        }

    @classmethod
    def from_dict(cls, group: PairingGroup, data: dict) -> "ProofTranscript":
        return cls(
            commitment=group.deserialize_g1(bytes.fromhex(data["Y"])),
            response=group.deserialize_scalar(bytes.fromhex(data["Z"])),
            challenge=group.deserialize_scalar(bytes.fromhex(data["epsilon"])),
        )


# 只有 protocol.py 在证明方程成立后持有该令牌
_VERIFIED = object()


@dataclass(frozen=True)
class VerifiedPseudonym:
    """已通过 Schnorr 验证的假名；证书签发只接受此类型。"""
    pseudonym: Pseudonym
    transcript: ProofTranscript
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._token is not _VERIFIED:
            raise TypeError("VerifiedPseudonym 只能由假名协议在验证成功后创建")


def mark_verified(pseudonym: Pseudonym, transcript: ProofTranscript) -> VerifiedPseudonym:
    return VerifiedPseudonym(pseudonym=pseudonym, transcript=transcript, _token=_VERIFIED)


@dataclass(frozen=True)
class Certificate:
    """基站对假名的证书 (ζx = b1*x, ζy = b2*y)。"""
    zeta_x: G1Element
    zeta_y: G1Element

    def to_dict(self, group: PairingGroup) -> dict:
        return {
            "zeta_x": group.serialize_g1(self.zeta_x).hex(),
            "zeta_y": group.serialize_g1(self.zeta_y).hex(),
        }

    @classmethod
    def from_dict(cls, group: PairingGroup, data: dict) -> "Certificate":
        return cls(
            zeta_x=group.deserialize_g1(bytes.fromhex(data["zeta_x"])),
            zeta_y=group.deserialize_g1(bytes.fromhex(data["zeta_y"])),
        )


# --- 协议消息（进程内传递） ---

@dataclass(frozen=True)
class PseudonymChallenge:
    """基站 -> 设备：重随机化后的 x = γ*g。"""
    x: G1Element


@dataclass(frozen=True)
class PseudonymResponse:
    """设备 -> 基站：y = d*x 以及证明的 (Y, Z)。"""
    y: G1Element
    commitment: G1Element
    response: Scalar
