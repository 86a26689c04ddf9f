import hashlib
from concurrent.futures import ThreadPoolExecutor

import pytest

from pymauth.crypto import CURVE_FAMILIES, PairingGroup, RandomSource, select_curve_family
from pymauth.errors import HashInputError, ParameterGenerationError


@pytest.mark.parametrize(
    "security_bits, name, expected",
    [
        (128, None, "bn128"),
        (254, None, "bn128"),
        (255, None, "bls12_381"),
        (128, "bls12_381", "bls12_381"),
    ],
)
def test_select_curve_family(security_bits, name, expected):
    family = select_curve_family(security_bits, name)
    assert family.name == expected
    assert family.order_bits >= security_bits


@pytest.mark.parametrize(
    "security_bits, name",
    [
        (256, None),
        (0, None),
        (-5, None),
        (255, "bn128"),
        (128, "type_a"),
    ],
)
def test_select_curve_family_rejects(security_bits, name):
    with pytest.raises(ParameterGenerationError) as excinfo:
        select_curve_family(security_bits, name)
    assert excinfo.value.stage == "setup"


def test_curve_families_order():
    assert [f.name for f in CURVE_FAMILIES] == ["bn128", "bls12_381"]


def test_seeded_random_source_is_reproducible():
    a = RandomSource(b"seed")
    b = RandomSource(b"seed")
    first = [a.randbelow(10**30) for _ in range(5)]
    assert first == [b.randbelow(10**30) for _ in range(5)]
    assert len(set(first)) == 5
    assert RandomSource(b"other").randbelow(10**30) != first[0]


def test_random_source_bounds():
    rng = RandomSource()
    assert not rng.deterministic
    assert all(0 <= rng.randbelow(7) < 7 for _ in range(50))
    with pytest.raises(ValueError):
        rng.randbelow(0)


def test_random_scalar_never_zero(group):
    rng = RandomSource(b"scalars")
    for _ in range(20):
        s = group.random_scalar(rng)
        assert 1 <= s < group.order


def test_hash_to_scalar_matches_sha256(group):
    data = b"Device123"
    expected = int.from_bytes(hashlib.sha256(data).digest(), "big") % group.order
    assert group.hash_to_scalar(data) == expected


def test_hash_to_g1_is_deterministic(group):
    assert group.eq(group.hash_to_g1(b"abc"), group.hash_to_g1(b"abc"))
    assert not group.eq(group.hash_to_g1(b"abc"), group.hash_to_g1(b"abd"))


def test_g1_serialization(group):
    p = group.random_g1(RandomSource(b"ser"))
    data = group.serialize_g1(p)
    assert len(data) == group.g1_len == 64
    assert group.eq(group.deserialize_g1(data), p)
    # 射影表示不同的同一点序列化结果一致
    doubled = group.add(p, p)
    assert group.serialize_g1(doubled) == group.serialize_g1(group.mul(p, 2))


def test_g1_identity_serializes_to_zeros(group):
    data = group.serialize_g1(group.g1_identity)
    assert data == b"\x00" * group.g1_len
    assert group.is_identity(group.deserialize_g1(data))


def test_g2_serialization(group):
    q = group.random_g2(RandomSource(b"ser2"))
    data = group.serialize_g2(q)
    assert len(data) == group.g2_len == 128
    assert group.eq(group.deserialize_g2(data), q)


def test_deserialize_rejects_malformed(group):
    with pytest.raises(HashInputError):
        group.deserialize_g1(b"\x01" * 10)
    off_curve = (1).to_bytes(32, "big") + (3).to_bytes(32, "big")
    with pytest.raises(HashInputError):
        group.deserialize_g1(off_curve)
    with pytest.raises(HashInputError):
        group.deserialize_scalar(group.order.to_bytes(group.scalar_len, "big"))


def test_scalar_serialization(group):
    s = group.random_scalar(RandomSource(b"s"))
    assert group.deserialize_scalar(group.serialize_scalar(s)) == s


def test_bls12_381_group_sizes():
    group = PairingGroup.for_security(255)
    assert group.name == "bls12_381"
    assert group.g1_len == 96
    p = group.random_g1(RandomSource(b"bls"))
    assert group.eq(group.deserialize_g1(group.serialize_g1(p)), p)


def test_seeded_random_source_shared_between_threads():
    shared = RandomSource(b"threads")
    bound = 2 ** 128

    def draw(_):
        return [shared.randbelow(bound) for _ in range(50)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        draws = [v for chunk in pool.map(draw, range(8)) for v in chunk]

    sequential = RandomSource(b"threads")
    expected = {sequential.randbelow(bound) for _ in range(400)}
    assert len(draws) == 400
    assert len(set(draws)) == 400
    assert set(draws) == expected


def test_deserialize_rejects_non_canonical_coordinates(group):
    modulus = group.field_modulus
    # (1, 2) 是 bn128 的 G1 生成元；x + p 是同一坐标的另一种编码
    encoded = (modulus + 1).to_bytes(32, "big") + (2).to_bytes(32, "big")
    assert group.eq(group.deserialize_g1((1).to_bytes(32, "big") + (2).to_bytes(32, "big")),
                    group.g1_generator)
    with pytest.raises(HashInputError):
        group.deserialize_g1(encoded)
    g2 = bytearray(group.serialize_g2(group.g2_generator))
    c0 = int.from_bytes(g2[:32], "big") + modulus
    g2[:32] = c0.to_bytes(32, "big")
    with pytest.raises(HashInputError):
        group.deserialize_g2(bytes(g2))
