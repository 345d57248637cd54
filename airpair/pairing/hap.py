import threading
from enum import Enum

from ..utils import get_screen_logger
from .errors import PairingError, ProtocolError
from .keys import (
    KEY_LENGTH,
    SIGNATURE_LENGTH,
    EphemeralKeyPair,
    HandshakeSigner,
    ed25519_to_curve25519,
    verify_signature,
    x25519_exchange,
)
from .setup import encrypt_setup_key
from .verify import (
    HEADER_LENGTH,
    START_REQUEST_LENGTH,
    decrypt_signature,
    encrypt_signature,
)


class PairVerifyState(Enum):
    START = 0
    M1_DONE = 1
    VERIFIED = 2
    FAILED = 3


class PairVerifySession:
    """Pair-verify state of one connection on the accessory side."""

    def __init__(self, connection=None):
        self.connection = connection
        self.state = PairVerifyState.START
        self.ecdh_ours = None
        self.ecdh_theirs = None
        self.ed_theirs = None
        self.ed_ours = None
        self.curve_theirs = None
        self.ecdh_secret = None
        self.verified = False
        self.lock = threading.Lock()

    def fail(self):
        if self.state in (PairVerifyState.START, PairVerifyState.M1_DONE):
            self.state = PairVerifyState.FAILED

    def close(self):
        # Waits for a message still being processed on another thread.
        with self.lock:
            if self.ecdh_secret is not None:
                for i in range(len(self.ecdh_secret)):
                    self.ecdh_secret[i] = 0
            self.ecdh_secret = None
            self.verified = False
            self.state = PairVerifyState.FAILED


class Hap:
    """Accessory side of pair-setup and pair-verify.

    Sessions are keyed by whatever identifies a connection for the
    transport. The two pair-verify phases of one connection must arrive in
    order and one at a time; anything else is a ProtocolError.
    """

    # Keystream offset of our own phase 1 signature.
    RESPONSE_PRIMING_LENGTH = 0
    # Keystream offset of the controller's phase 2 signature. The controller
    # primes with the 64 encrypted signature bytes it received from us.
    SIGNATURE_PRIMING_LENGTH = SIGNATURE_LENGTH

    def __init__(self, identity, response_priming_length=None, signature_priming_length=None, isDebug=False):
        self.identity = identity
        self.response_priming_length = self.RESPONSE_PRIMING_LENGTH \
            if response_priming_length is None else response_priming_length
        self.signature_priming_length = self.SIGNATURE_PRIMING_LENGTH \
            if signature_priming_length is None else signature_priming_length
        self.sessions = {}
        self.sessions_lock = threading.Lock()
        level = 'DEBUG' if isDebug else 'INFO'
        self.logger = get_screen_logger('HAP', level=level)

    def session(self, connection):
        with self.sessions_lock:
            if connection not in self.sessions:
                self.sessions[connection] = PairVerifySession(connection)
            return self.sessions[connection]

    def close(self, connection):
        with self.sessions_lock:
            session = self.sessions.pop(connection, None)
        if session:
            session.close()

    def pair_setup(self, shared_secret):
        self.logger.debug("-----\tPair-Setup [1/1]")
        enc_key, tag = encrypt_setup_key(self.identity.public, shared_secret)
        return enc_key + tag

    def pair_verify(self, connection, request):
        session = self.session(connection)
        if not session.lock.acquire(blocking=False):
            raise ProtocolError("Pair-verify message for %s while another is in progress" % (connection,))
        try:
            if len(request) < HEADER_LENGTH:
                session.fail()
                raise ProtocolError("Pair-verify request too short: %d bytes" % len(request))
            if request[0] > 0:
                self.logger.debug("-----\tPair-Verify [1/2]")
                return self.process_phase1(session, request)
            self.logger.debug("-----\tPair-Verify [2/2]")
            self.process_phase2(session, request)
            return b''
        finally:
            session.lock.release()

    def process_phase1(self, session, request):
        try:
            return self._phase1(session, request)
        except PairingError:
            session.fail()
            raise

    def process_phase2(self, session, request):
        try:
            return self._phase2(session, request)
        except PairingError:
            session.fail()
            raise

    def _phase1(self, session, request):
        if session.state is not PairVerifyState.START:
            raise ProtocolError("Pair-verify phase 1 not allowed in state %s" % session.state.name)
        if len(request) < HEADER_LENGTH or request[0] == 0:
            raise ProtocolError("Pair-verify phase 1 needs a non-zero phase flag")
        if len(request) < START_REQUEST_LENGTH:
            raise ProtocolError("Pair-verify phase 1 request too short: %d bytes" % len(request))

        payload = bytes(request[HEADER_LENGTH:START_REQUEST_LENGTH])
        session.ecdh_theirs = payload[:KEY_LENGTH]
        session.ed_theirs = payload[KEY_LENGTH:]

        accessory_curve = EphemeralKeyPair.generate()
        session.ecdh_ours = accessory_curve.public
        session.ecdh_secret = bytearray(x25519_exchange(accessory_curve.private, session.ecdh_theirs))
        self.logger.debug(f"Shared secret: {session.ecdh_secret.hex()}")

        signer = HandshakeSigner.generate()
        session.ed_ours = signer.public
        signature = signer.sign(session.ecdh_ours + session.ecdh_theirs)
        enc_signature = encrypt_signature(session.ecdh_secret, bytes(self.response_priming_length), signature)

        session.state = PairVerifyState.M1_DONE
        return session.ecdh_ours + enc_signature

    def _phase2(self, session, request):
        if session.state is not PairVerifyState.M1_DONE:
            raise ProtocolError("Pair-verify phase 2 not allowed in state %s" % session.state.name)
        if len(request) < HEADER_LENGTH or request[0] != 0:
            raise ProtocolError("Pair-verify phase 2 needs a zero phase flag")
        if len(request) < HEADER_LENGTH + SIGNATURE_LENGTH:
            raise ProtocolError("Pair-verify phase 2 request too short: %d bytes" % len(request))

        enc_signature = bytes(request[HEADER_LENGTH:HEADER_LENGTH + SIGNATURE_LENGTH])
        signature = decrypt_signature(session.ecdh_secret, bytes(self.signature_priming_length), enc_signature)

        session.curve_theirs = ed25519_to_curve25519(session.ed_theirs)
        session.verified = verify_signature(session.ed_theirs, session.ecdh_theirs + session.ecdh_ours, signature)
        session.state = PairVerifyState.VERIFIED if session.verified else PairVerifyState.FAILED

        self.logger.debug(f"Pair verified: {session.verified}")
        return session.verified
