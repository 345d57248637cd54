from .errors import InvalidKeyMaterial, PairingError, ProtocolError
from .hap import Hap, PairVerifySession, PairVerifyState
from .keys import (
    EphemeralKeyPair,
    HandshakeSigner,
    LongTermIdentity,
    SharedSecretLabel,
    derive,
)
from .setup import decrypt_setup_key, encrypt_setup_key
from .verify import (
    HapClient,
    build_verify_finish,
    build_verify_request,
    compute_shared,
    decrypt_signature,
    encrypt_signature,
    sign_transcript,
)

__all__ = [
    "InvalidKeyMaterial",
    "PairingError",
    "ProtocolError",
    "Hap",
    "PairVerifySession",
    "PairVerifyState",
    "EphemeralKeyPair",
    "HandshakeSigner",
    "LongTermIdentity",
    "SharedSecretLabel",
    "derive",
    "decrypt_setup_key",
    "encrypt_setup_key",
    "HapClient",
    "build_verify_finish",
    "build_verify_request",
    "compute_shared",
    "decrypt_signature",
    "encrypt_signature",
    "sign_transcript",
]
