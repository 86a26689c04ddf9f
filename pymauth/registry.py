"""
设备注册

设备生成私钥 d 与公钥 dg = d*g，注册表计算承诺 H(H(id) || dg) 将身份与公钥绑定。
挂接了外部存储时承诺会被保存，之后的识别总是重新计算摘要并比较，
从不单凭身份字符串信任设备。
"""
import hmac
from typing import Optional, Tuple, Union

from pymauth.common.datastructures import DeviceIdentity, RegistrationCommitment, SystemContext
from pymauth.crypto import G1Element
from pymauth.errors import DegenerateProofInputError, DuplicateRegistrationError, HashInputError
from pymauth.storage.registry_store import CommitmentStore
from pymauth.utils import fingerprint, log_msg, sha256_digest

DEFAULT_MAX_IDENTITY_LENGTH = 256

Identity = Union[bytes, str]


def normalize_identity(identity: Identity, max_length: int = DEFAULT_MAX_IDENTITY_LENGTH) -> bytes:
    """将身份转换为字节串并检查长度。"""
    if isinstance(identity, str):
        identity = identity.encode("utf-8")
    if not isinstance(identity, (bytes, bytearray)):
        raise HashInputError(f"身份必须是 bytes 或 str，收到 {type(identity).__name__}")
    identity = bytes(identity)
    if not identity:
        raise HashInputError("身份不能为空")
    if len(identity) > max_length:
        raise HashInputError(f"身份长度 {len(identity)} 超过上限 {max_length} 字节")
    return identity


def compute_commitment(context: SystemContext, identity: bytes, public_key: G1Element) -> bytes:
    """H(H(id) || serialize(dg))"""
    digest1 = sha256_digest(identity)
    return sha256_digest(digest1 + context.group.serialize_g1(public_key))


class DeviceRegistry:
    """设备注册表：生成设备密钥并计算/保存注册承诺。"""

    def __init__(self, context: SystemContext, store: Optional[CommitmentStore] = None,
                 max_identity_length: int = DEFAULT_MAX_IDENTITY_LENGTH):
        self.context = context
        self.store = store
        self.max_identity_length = max_identity_length

    def register(self, identity: Identity) -> Tuple[DeviceIdentity, RegistrationCommitment]:
        """
        注册一个设备。

        :return: (DeviceIdentity, RegistrationCommitment)；前者留在设备侧。
        :raises HashInputError: 身份为空或过长。
        :raises DuplicateRegistrationError: 外部存储中已存在该身份。
        """
        ident = normalize_identity(identity, self.max_identity_length)
        if self.store is not None and ident in self.store:
            log_msg("WARN", "REGISTRY", None, f"拒绝重复注册身份 {ident!r}")
            raise DuplicateRegistrationError(f"身份 {ident!r} 已注册")

        group = self.context.group
        d = group.random_scalar(self.context.rng)
        dg = group.mul(self.context.params.g, d)
        if group.is_identity(dg):
            log_msg("ERROR", "REGISTRY", None, "设备公钥退化为单位元")
            raise DegenerateProofInputError("设备公钥退化为单位元", stage="registration")

        digest = compute_commitment(self.context, ident, dg)
        commitment = RegistrationCommitment(id=ident, digest=digest)

        if self.store is not None and not self.store.put(ident, digest):
            raise DuplicateRegistrationError(f"身份 {ident!r} 已注册")

        log_msg("INFO", "REGISTRY", None, f"设备 {ident!r} 注册完成，承诺: {digest.hex()}")
        log_msg("DEBUG", "REGISTRY", None, f"设备公钥指纹 {fingerprint(group.serialize_g1(dg))}")
        return DeviceIdentity(id=ident, private_key=d, public_key=dg), commitment

    def lookup(self, identity: Identity) -> Optional[bytes]:
        """返回外部存储中的承诺摘要。"""
        if self.store is None:
            return None
        return self.store.get(normalize_identity(identity, self.max_identity_length))

    def is_registered(self, identity: Identity, public_key: G1Element) -> bool:
        """重新计算 H(H(id) || dg) 并与已存储的摘要做常数时间比较。"""
        stored = self.lookup(identity)
        if stored is None:
            return False
        ident = normalize_identity(identity, self.max_identity_length)
        recomputed = compute_commitment(self.context, ident, public_key)
        return hmac.compare_digest(recomputed, stored)

    def matches(self, commitment: RegistrationCommitment, public_key: G1Element) -> bool:
        """在没有外部存储时，直接对照调用方持有的承诺检查。"""
        recomputed = compute_commitment(self.context, commitment.id, public_key)
        return hmac.compare_digest(recomputed, commitment.digest)
