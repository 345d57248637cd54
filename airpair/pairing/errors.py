class PairingError(Exception):
    """Base class for handshake failures that end the pairing attempt."""
    pass


class ProtocolError(PairingError):
    """Wrong phase flag, malformed request or a phase processed out of order."""
    pass


class InvalidKeyMaterial(PairingError):
    """A received key is not a usable curve point."""
    pass
