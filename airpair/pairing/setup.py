from Crypto.Cipher import AES

from .errors import InvalidKeyMaterial
from .keys import SharedSecretLabel, derive


def _setup_cipher(shared_secret):
    key = derive(SharedSecretLabel.SETUP_KEY, shared_secret)
    iv = derive(SharedSecretLabel.SETUP_IV, shared_secret)
    return AES.new(key, AES.MODE_GCM, nonce=iv, mac_len=16)


def encrypt_setup_key(long_term_public, shared_secret):
    """Wrap a long-term Ed25519 public key with the SRP session key K.

    Returns the ciphertext and the 16 byte GCM tag separately; framing them
    is left to the transport.
    """
    c = _setup_cipher(shared_secret)
    enc_key, tag = c.encrypt_and_digest(bytes(long_term_public))
    return enc_key, tag


def decrypt_setup_key(enc_key, tag, shared_secret):
    c = _setup_cipher(shared_secret)
    try:
        return c.decrypt_and_verify(bytes(enc_key), bytes(tag))
    except ValueError as e:
        raise InvalidKeyMaterial("Pair-setup tag mismatch") from e
