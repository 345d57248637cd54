from enum import Enum
from hashlib import sha512

import nacl.exceptions
import nacl.signing
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import x25519

from .errors import InvalidKeyMaterial

KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
AES_KEY_LENGTH = 16


class SharedSecretLabel(Enum):
    SETUP_KEY = b"Pair-Setup-AES-Key"
    SETUP_IV = b"Pair-Setup-AES-IV"
    VERIFY_KEY = b"Pair-Verify-AES-Key"
    VERIFY_IV = b"Pair-Verify-AES-IV"


def derive(label, secret):
    """Turn a raw shared secret into a 16 byte AES key or IV.

    The digest is SHA-512 over the ASCII label followed by the secret. The
    pair-setup IV carries a fixed +1 on its last byte (wrapping at 0xff);
    every other label uses the truncated digest as is.
    """
    digest = bytearray(sha512(label.value + bytes(secret)).digest()[:AES_KEY_LENGTH])
    if label is SharedSecretLabel.SETUP_IV:
        digest[-1] = (digest[-1] + 1) & 0xff
    return bytes(digest)


class _Ed25519KeyPair:
    def __init__(self, signing_key):
        self._signing_key = signing_key
        self.public = bytes(signing_key.verify_key)

    @classmethod
    def generate(cls):
        return cls(nacl.signing.SigningKey.generate())

    @classmethod
    def from_seed(cls, seed):
        return cls(nacl.signing.SigningKey(bytes(seed)))

    def sign(self, data):
        return self._signing_key.sign(data).signature

    def __repr__(self):
        return "%s(public=%s)" % (self.__class__.__name__, self.public.hex())


class LongTermIdentity(_Ed25519KeyPair):
    """Persistent Ed25519 identity of a party. Only the public half is ever sent."""
    pass


class HandshakeSigner(_Ed25519KeyPair):
    """Ed25519 key pair the accessory generates for a single pair-verify run.

    It signs the accessory's phase-1 transcript and is thrown away with the
    session; it is never a stand-in for a LongTermIdentity.
    """
    pass


class EphemeralKeyPair:
    def __init__(self, private_key=None):
        if private_key is None:
            private_key = x25519.X25519PrivateKey.generate()
        self.private = private_key
        self.public = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw
        )

    @classmethod
    def generate(cls):
        return cls(x25519.X25519PrivateKey.generate())

    @classmethod
    def from_private_bytes(cls, data):
        return cls(x25519.X25519PrivateKey.from_private_bytes(bytes(data)))


def x25519_exchange(private_key, peer_public):
    """X25519 scalar multiplication of our private key with a received public key."""
    try:
        peer = x25519.X25519PublicKey.from_public_bytes(bytes(peer_public))
        return private_key.exchange(peer)
    except ValueError as e:
        raise InvalidKeyMaterial("Unusable X25519 public key: %s" % e) from e


def ed25519_to_curve25519(ed_public):
    """Map an Ed25519 public key onto its X25519 (Montgomery) form."""
    try:
        verify_key = nacl.signing.VerifyKey(bytes(ed_public))
        return bytes(verify_key.to_curve25519_public_key())
    except nacl.exceptions.CryptoError as e:
        raise InvalidKeyMaterial("Unusable Ed25519 public key: %s" % e) from e


def verify_signature(ed_public, message, signature):
    try:
        nacl.signing.VerifyKey(bytes(ed_public)).verify(bytes(message), bytes(signature))
    except nacl.exceptions.BadSignatureError:
        return False
    return True
