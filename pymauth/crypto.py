"""
配对密码学原语，使用 py_ecc 库（optimized 后端）。

原方案基于对称 Type A 配对 e: G1 x G1 -> GT。py_ecc 只提供非对称曲线，
因此这里以 e: G2 x G1 -> GT 实现：G1 中的每个公钥在 G2 中都有一个同指数的镜像，
验证方程在 G2 一侧使用镜像（见 verifier.py）。

支持的曲线族按顺序尝试：bn128（altbn128/BN254）与 bls12_381。
注意：本模块的 serialize_* 返回 bytes（仿射坐标、定长、确定性编码），便于哈希与传输。
"""
import hashlib
import secrets
import threading
from dataclasses import dataclass
from types import ModuleType
from typing import TypeAlias, Any, List, Optional, Tuple

from py_ecc import optimized_bls12_381, optimized_bn128

from pymauth.errors import HashInputError, ParameterGenerationError

# --- 为清晰起见定义的类型别名 ---
Scalar: TypeAlias = int
G1Element: TypeAlias = Any
G2Element: TypeAlias = Any
GTElement: TypeAlias = Any

# hash_to_g1 的域分离标签
H1_DST = b"PYMAUTH-H1-DST-v1"


@dataclass(frozen=True)
class CurveFamily:
    """一个可用的配对友好曲线族。"""
    name: str
    backend: ModuleType

    @property
    def order(self) -> int:
        return self.backend.curve_order

    @property
    def order_bits(self) -> int:
        return self.order.bit_length()


# 按偏好顺序排列
CURVE_FAMILIES: Tuple[CurveFamily, ...] = (
    CurveFamily("bn128", optimized_bn128),
    CurveFamily("bls12_381", optimized_bls12_381),
)


def select_curve_family(security_bits: int, name: Optional[str] = None) -> CurveFamily:
    """
    选择群阶不低于 security_bits 位的曲线族。

    :param security_bits: 要求的安全位数（群阶的最小位长）。
    :param name: 指定曲线族名称；为 None 时按 CURVE_FAMILIES 顺序选择第一个满足要求的。
    :raises ParameterGenerationError: 参数非法或没有曲线族满足要求。
    """
    if not isinstance(security_bits, int) or isinstance(security_bits, bool) or security_bits <= 0:
        raise ParameterGenerationError(f"安全位数必须为正整数，收到 {security_bits!r}")

    if name is not None:
        candidates = [f for f in CURVE_FAMILIES if f.name == name]
        if not candidates:
            known = ", ".join(f.name for f in CURVE_FAMILIES)
            raise ParameterGenerationError(f"未知曲线族 {name!r}（可选: {known}）")
    else:
        candidates = list(CURVE_FAMILIES)

    for family in candidates:
        if family.order_bits >= security_bits:
            return family

    best = max(f.order_bits for f in candidates)
    raise ParameterGenerationError(
        f"无法满足 {security_bits} 位安全要求：可用群阶最多 {best} 位"
    )


class RandomSource:
    """
    标量随机源。

    未提供种子时直接使用 secrets（CSPRNG）。提供种子时为确定性的 SHA-256 计数器模式，
    仅用于可复现的测试与基准；内部计数器由锁保护，可在线程间共享。
    """

    def __init__(self, seed: Optional[bytes] = None):
        if isinstance(seed, str):
            seed = seed.encode("utf-8")
        self._seed = seed
        self._counter = 0
        self._lock = threading.Lock()

    @property
    def deterministic(self) -> bool:
        return self._seed is not None

    def randbelow(self, n: int) -> int:
        """返回 [0, n) 内的随机整数。"""
        if n <= 0:
            raise ValueError("上界必须为正")
        if self._seed is None:
            return secrets.randbelow(n)
        # 多取 64 位再取模，偏差可忽略
        nbytes = (n.bit_length() + 64 + 7) // 8
        with self._lock:
            counter = self._counter
            self._counter += 1
        stream = b""
        block = 0
        while len(stream) < nbytes:
            stream += hashlib.sha256(
                self._seed + counter.to_bytes(8, "big") + block.to_bytes(4, "big")
            ).digest()
            block += 1
        return int.from_bytes(stream[:nbytes], "big") % n


# --- 内部工具：提取 int/坐标 ---
def _int_of(x: Any) -> int:
    if hasattr(x, "n"):
        return int(x.n)
    return int(x)


def _fq2_to_pair(x: Any) -> Tuple[int, int]:
    # FQ2 可能有 coeffs 成员，或直接是 (c0, c1)
    if hasattr(x, "coeffs"):
        a, b = x.coeffs
        return _int_of(a), _int_of(b)
    a, b = x
    return _int_of(a), _int_of(b)


class PairingGroup:
    """
    绑定到某个曲线族的群运算门面（G1、G2、GT 与 Z_q）。

    所有元素都是 py_ecc 的不可变元组/域元素，运算总是返回新值。
    """

    def __init__(self, family: CurveFamily):
        self.family = family
        self._b = family.backend
        self.order: int = family.order
        self.g1_generator: G1Element = self._b.G1
        self.g2_generator: G2Element = self._b.G2
        self.g1_identity: G1Element = self._b.Z1
        self.field_modulus: int = self._b.FQ.field_modulus
        self.coord_len = (self.field_modulus.bit_length() + 7) // 8
        self.g1_len = 2 * self.coord_len
        self.g2_len = 4 * self.coord_len
        self.scalar_len = (self.order.bit_length() + 7) // 8

    @classmethod
    def for_security(cls, security_bits: int, name: Optional[str] = None) -> "PairingGroup":
        return cls(select_curve_family(security_bits, name))

    @property
    def name(self) -> str:
        return self.family.name

    # --- Z_q ---
    def random_scalar(self, rng: RandomSource) -> Scalar:
        """生成一个范围在[1, q - 1]内的随机标量。"""
        return rng.randbelow(self.order - 1) + 1

    def scalar_add(self, a: Scalar, b: Scalar) -> Scalar:
        return (a + b) % self.order

    def scalar_mul(self, a: Scalar, b: Scalar) -> Scalar:
        return (a * b) % self.order

    # --- G1 / G2 ---
    def mul(self, point, k: Scalar):
        """标量乘法 k*P（G1 或 G2）。"""
        return self._b.multiply(point, int(k) % self.order)

    def add(self, p, q):
        return self._b.add(p, q)

    def neg(self, p):
        return self._b.neg(p)

    def eq(self, p, q) -> bool:
        return self._b.eq(p, q)

    def is_identity(self, p) -> bool:
        return self._b.is_inf(p)

    def random_g1(self, rng: RandomSource) -> G1Element:
        """在 G1 中均匀采样一个非单位元。"""
        return self.mul(self.g1_generator, self.random_scalar(rng))

    def random_g2(self, rng: RandomSource) -> G2Element:
        return self.mul(self.g2_generator, self.random_scalar(rng))

    # --- 配对 ---
    def pair(self, q_g2: G2Element, p_g1: G1Element) -> GTElement:
        """计算双线性对 e(Q, P)，Q ∈ G2，P ∈ G1。"""
        return self._b.pairing(q_g2, p_g1)

    # --- 哈希 ---
    def hash_to_scalar(self, data: bytes) -> Scalar:
        """将字节字符串哈希为标量，模群阶。"""
        h = hashlib.sha256(data).digest()
        return int.from_bytes(h, "big") % self.order

    def hash_to_g1(self, data: bytes) -> G1Element:
        """将字节字符串哈希为 G1 中的一个点（简化映射，非严格 hash-to-curve）。"""
        k = self.hash_to_scalar(H1_DST + data)
        return self.mul(self.g1_generator, k)

    # --- 序列化 / 反序列化（bytes） ---
    # 约定：
    # - G1: x || y 仿射坐标，单位元用全 0 表示
    # - G2: x.c0 || x.c1 || y.c0 || y.c1，单位元同理全 0
    def serialize_g1(self, p: G1Element) -> bytes:
        if self.is_identity(p):
            return b"\x00" * self.g1_len
        x, y = self._b.normalize(p)
        n = self.coord_len
        return _int_of(x).to_bytes(n, "big") + _int_of(y).to_bytes(n, "big")

    def _coords(self, b: bytes, count: int) -> List[int]:
        """按定宽切分坐标；坐标必须小于域模数，保证编码唯一。"""
        n = self.coord_len
        coords = [int.from_bytes(b[i * n:(i + 1) * n], "big") for i in range(count)]
        if any(c >= self.field_modulus for c in coords):
            raise HashInputError("坐标超出域模数")
        return coords

    def deserialize_g1(self, b: bytes) -> G1Element:
        if len(b) != self.g1_len:
            raise HashInputError(f"G1 序列化长度应为 {self.g1_len} 字节，收到 {len(b)}")
        if b == b"\x00" * self.g1_len:
            return self.g1_identity
        FQ = self._b.FQ
        x, y = self._coords(b, 2)
        pt = (FQ(x), FQ(y), FQ.one())
        if not self._b.is_on_curve(pt, self._b.b):
            raise HashInputError("G1 点不在曲线上")
        if not self.is_identity(self._b.multiply(pt, self.order)):
            raise HashInputError("G1 点不在素数阶子群中")
        return pt

    def serialize_g2(self, p: G2Element) -> bytes:
        if self.is_identity(p):
            return b"\x00" * self.g2_len
        x, y = self._b.normalize(p)
        n = self.coord_len
        out = b""
        for coord in (x, y):
            c0, c1 = _fq2_to_pair(coord)
            out += c0.to_bytes(n, "big") + c1.to_bytes(n, "big")
        return out

    def deserialize_g2(self, b: bytes) -> G2Element:
        if len(b) != self.g2_len:
            raise HashInputError(f"G2 序列化长度应为 {self.g2_len} 字节，收到 {len(b)}")
        FQ2 = self._b.FQ2
        if b == b"\x00" * self.g2_len:
            return self._b.Z2
        c = self._coords(b, 4)
        pt = (FQ2([c[0], c[1]]), FQ2([c[2], c[3]]), FQ2.one())
        if not self._b.is_on_curve(pt, self._b.b2):
            raise HashInputError("G2 点不在曲线上")
        if not self.is_identity(self._b.multiply(pt, self.order)):
            raise HashInputError("G2 点不在素数阶子群中")
        return pt

    def serialize_scalar(self, s: Scalar) -> bytes:
        return (int(s) % self.order).to_bytes(self.scalar_len, "big")

    def deserialize_scalar(self, b: bytes) -> Scalar:
        if len(b) != self.scalar_len:
            raise HashInputError(f"标量序列化长度应为 {self.scalar_len} 字节，收到 {len(b)}")
        s = int.from_bytes(b, "big")
        if s >= self.order:
            raise HashInputError("标量超出群阶")
        return s

    def __repr__(self) -> str:
        return f"PairingGroup({self.name}, order_bits={self.order.bit_length()})"
