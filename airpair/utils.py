import sys
import socket
import logging


def get_screen_logger(name, level='INFO'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(asctime)s %(name)s %(levelname)s %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_local_address(probe=('10.255.255.255', 1)):
    """Best guess at the IPv4 address other hosts on the LAN reach us on.

    Connecting a UDP socket sends nothing; it only makes the kernel pick the
    outgoing interface.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(probe)
        return s.getsockname()[0]
    except OSError:
        return '127.0.0.1'
    finally:
        s.close()
