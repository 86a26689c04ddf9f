"""
基于配对的隐私保护设备认证。

基站发放不可链接的假名证书，并在不获知设备长期私钥的前提下验证设备身份。
"""
from pymauth.common.datastructures import (
    Certificate,
    DeviceIdentity,
    ProofTranscript,
    Pseudonym,
    PublicParameters,
    RegistrationCommitment,
    SystemContext,
    SystemParameters,
    VerifiedPseudonym,
)
from pymauth.common.result import Outcome
from pymauth.config import AuthConfig
from pymauth.crypto import PairingGroup, RandomSource
from pymauth.errors import (
    CertificateVerificationFailure,
    DegenerateProofInputError,
    DuplicateRegistrationError,
    HashInputError,
    ParameterGenerationError,
    ProofVerificationFailure,
    ProtocolError,
)
from pymauth.protocol import PseudonymProtocol
from pymauth.registry import DeviceRegistry
from pymauth.roles.base_station import BaseStation, CertificateAuthority, ParameterAuthority
from pymauth.roles.device import Device
from pymauth.verifier import Verifier

__version__ = "0.1.0"
