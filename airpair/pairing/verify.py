from Crypto.Cipher import AES
from Crypto.Util import Counter

from ..utils import get_screen_logger
from .errors import ProtocolError
from .keys import (
    KEY_LENGTH,
    SIGNATURE_LENGTH,
    EphemeralKeyPair,
    SharedSecretLabel,
    derive,
    x25519_exchange,
)


class PairVerifyFlag:
    FINISH = 0x00
    START = 0x01


HEADER_LENGTH = 4
START_REQUEST_LENGTH = HEADER_LENGTH + 2 * KEY_LENGTH
START_RESPONSE_LENGTH = KEY_LENGTH + SIGNATURE_LENGTH


def header(flag):
    return bytes([flag, 0x00, 0x00, 0x00])


def pair_verify_cipher(shared_secret):
    """AES-128-CTR keyed from the pair-verify shared secret.

    The IV is the initial value of a full 128 bit big-endian counter.
    """
    key = derive(SharedSecretLabel.VERIFY_KEY, shared_secret)
    iv = derive(SharedSecretLabel.VERIFY_IV, shared_secret)
    ctr = Counter.new(nbits=128, initial_value=int.from_bytes(iv, 'big'))
    return AES.new(key, AES.MODE_CTR, counter=ctr)


def encrypt_signature(shared_secret, associated_transcript, signature):
    """Encrypt a 64 byte signature after advancing the keystream.

    The cipher first runs over associated_transcript and the output is
    dropped, so the signature starts at keystream offset
    len(associated_transcript). Both sides must prime by the same amount.
    """
    c = pair_verify_cipher(shared_secret)
    if associated_transcript:
        c.encrypt(bytes(associated_transcript))
    return c.encrypt(bytes(signature))


def decrypt_signature(shared_secret, associated_transcript, enc_signature):
    c = pair_verify_cipher(shared_secret)
    if associated_transcript:
        c.decrypt(bytes(associated_transcript))
    return c.decrypt(bytes(enc_signature))


def build_verify_request(identity):
    ephemeral = EphemeralKeyPair.generate()
    request = header(PairVerifyFlag.START) + ephemeral.public + identity.public
    return request, ephemeral


def compute_shared(our_private, peer_public):
    return x25519_exchange(our_private, peer_public)


def sign_transcript(identity, our_public, peer_public):
    return identity.sign(bytes(our_public) + bytes(peer_public))


def build_verify_finish(enc_signature):
    return header(PairVerifyFlag.FINISH) + bytes(enc_signature)


class HapClient:
    """Controller side of pair-verify.

    verify_request() produces the phase 1 body; verify_finish() consumes the
    accessory's answer (its ephemeral public key followed by its encrypted
    signature) and produces the phase 2 body. The accessory's encrypted
    signature is the transcript used to prime our own encryption.
    """

    # Keystream offset of our signature: the leading bytes of the accessory's
    # encrypted signature are run through the cipher first.
    PRIMING_LENGTH = SIGNATURE_LENGTH

    def __init__(self, identity, priming_length=None, isDebug=False):
        self.identity = identity
        self.priming_length = self.PRIMING_LENGTH if priming_length is None else priming_length
        self.ephemeral = None
        self.accessory_curve_public = None
        self.shared_key = None
        level = 'DEBUG' if isDebug else 'INFO'
        self.logger = get_screen_logger('HapClient', level=level)

    def verify_request(self):
        self.logger.debug("-----\tPair-Verify [1/2]")
        request, self.ephemeral = build_verify_request(self.identity)
        self.shared_key = None
        return request

    def verify_finish(self, response):
        if self.ephemeral is None:
            raise ProtocolError("Pair-verify response received before a request was built")
        if len(response) < START_RESPONSE_LENGTH:
            raise ProtocolError("Pair-verify response too short: %d bytes" % len(response))
        self.logger.debug("-----\tPair-Verify [2/2]")

        self.accessory_curve_public = bytes(response[:KEY_LENGTH])
        accessory_data = bytes(response[KEY_LENGTH:START_RESPONSE_LENGTH])

        self.shared_key = compute_shared(self.ephemeral.private, self.accessory_curve_public)
        signature = sign_transcript(self.identity, self.ephemeral.public, self.accessory_curve_public)
        transcript = accessory_data[:self.priming_length]
        transcript += bytes(self.priming_length - len(transcript))
        enc_signature = encrypt_signature(self.shared_key, transcript, signature)

        return build_verify_finish(enc_signature)
