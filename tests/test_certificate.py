import pytest

from pymauth.common.datastructures import Certificate, Pseudonym, PublicParameters, SystemParameters
from pymauth.crypto import RandomSource
from pymauth.errors import CertificateVerificationFailure, HashInputError
from pymauth.protocol import PseudonymProtocol
from pymauth.verifier import Verifier, verify


@pytest.fixture(scope="module")
def issued(base_station, device):
    verified = PseudonymProtocol(base_station, device).run().unwrap()
    return verified, base_station.issue_certificate(verified)


@pytest.fixture(scope="module")
def verifier(context):
    return Verifier(context.group, context.public)


def test_certificate_is_keyed_scalar_multiple(context, issued):
    verified, cert = issued
    group = context.group
    assert group.eq(cert.zeta_x, group.mul(verified.pseudonym.x, context.key1.private_key))
    assert group.eq(cert.zeta_y, group.mul(verified.pseudonym.y, context.key2.private_key))


def test_issue_is_deterministic(base_station, issued, group):
    verified, cert = issued
    again = base_station.issue_certificate(verified)
    assert group.eq(again.zeta_x, cert.zeta_x)
    assert group.eq(again.zeta_y, cert.zeta_y)


def test_certificate_verifies(verifier, issued):
    verified, cert = issued
    assert verifier.verify(verified.pseudonym, cert)
    outcome = verifier.check(verified.pseudonym, cert)
    assert outcome.ok
    assert outcome.unwrap() is verified.pseudonym


def test_module_level_verify(context, issued):
    verified, cert = issued
    p = context.public
    assert verify(context.group, verified.pseudonym.x, verified.pseudonym.y, cert.zeta_x, cert.zeta_y,
                  p.h1_hat, p.h2_hat, p.params.g_hat)


def test_random_zeta_x_rejected(verifier, issued, group):
    verified, cert = issued
    bad = Certificate(zeta_x=group.random_g1(RandomSource(b"zx")), zeta_y=cert.zeta_y)
    assert not verifier.verify(verified.pseudonym, bad)


def test_random_zeta_y_rejected(verifier, issued, group):
    verified, cert = issued
    bad = Certificate(zeta_x=cert.zeta_x, zeta_y=group.random_g1(RandomSource(b"zy")))
    outcome = verifier.check(verified.pseudonym, bad)
    assert not outcome.ok
    assert outcome.stage == "verification"
    with pytest.raises(CertificateVerificationFailure):
        outcome.unwrap()


def test_other_session_pseudonym_rejected(verifier, issued, base_station, device):
    _, cert = issued
    other = PseudonymProtocol(base_station, device).run().unwrap()
    assert not verifier.verify(other.pseudonym, cert)


def test_swapped_xy_rejected(verifier, issued):
    verified, cert = issued
    swapped = Pseudonym(x=verified.pseudonym.y, y=verified.pseudonym.x)
    assert not verifier.verify(swapped, cert)


def test_identity_elements_rejected(verifier, group):
    zero = group.g1_identity
    assert not verifier.verify(Pseudonym(x=zero, y=zero), Certificate(zeta_x=zero, zeta_y=zero))


def test_unverified_pseudonym_cannot_be_certified(base_station, issued):
    verified, _ = issued
    with pytest.raises(TypeError):
        base_station.issue_certificate(verified.pseudonym)


def test_certificate_to_dict(group, issued):
    _, cert = issued
    restored = Certificate.from_dict(group, cert.to_dict(group))
    assert group.eq(restored.zeta_x, cert.zeta_x)
    assert group.eq(restored.zeta_y, cert.zeta_y)


def test_identity_public_keys_rejected(context, group):
    zero_hat = group.deserialize_g2(b"\x00" * group.g2_len)
    public = PublicParameters(
        params=SystemParameters(curve=group.name, order=group.order, g=context.params.g, g_hat=zero_hat),
        h1=context.key1.public_key,
        h2=context.key2.public_key,
        h1_hat=zero_hat,
        h2_hat=zero_hat,
    )
    rng = RandomSource(b"any-cert")
    pseudonym = Pseudonym(x=group.random_g1(rng), y=group.random_g1(rng))
    cert = Certificate(zeta_x=group.random_g1(rng), zeta_y=group.random_g1(rng))
    assert not Verifier(group, public).verify(pseudonym, cert)


def test_public_parameters_from_dict_rejects_identity_keys(context, group):
    data = context.public.to_dict(group)
    for key in ("g_hat", "h1_hat", "h2_hat"):
        data[key] = "00" * group.g2_len
    with pytest.raises(HashInputError) as excinfo:
        PublicParameters.from_dict(group, data)
    assert excinfo.value.stage == "setup"


def test_public_parameters_from_dict_rejects_mismatched_mirror(context, group):
    data = context.public.to_dict(group)
    data["h1_hat"], data["h2_hat"] = data["h2_hat"], data["h1_hat"]
    with pytest.raises(HashInputError):
        PublicParameters.from_dict(group, data)
