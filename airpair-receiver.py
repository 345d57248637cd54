import uuid
import argparse

from zeroconf import IPVersion, Zeroconf

from airpair.pairing import LongTermIdentity
from airpair.receiver import AirPairServer, device_info, mdns_service_info
from airpair.utils import get_local_address, get_screen_logger

DEVICE_ID = "00:05:CD:D4:42:38"
DEVICE_NAME = "AirPlay-Test"
DEVICE_MODEL = "AppleTV3,2"
PORT = 7000


def parse_args():
    parser = argparse.ArgumentParser(prog='AirPair receiver')
    parser.add_argument("-n", "--name", default=DEVICE_NAME, help="Name advertised over mDNS")
    parser.add_argument("-p", "--port", type=int, default=PORT)
    parser.add_argument("-a", "--address", help="IPv4 address to advertise (default: probed)")
    parser.add_argument("--device-id", default=DEVICE_ID)
    parser.add_argument("--model", default=DEVICE_MODEL)
    parser.add_argument("--setup-secret", help="Hex SRP session key K used to answer pair-setup")
    parser.add_argument("--identity-seed", help="Hex 32 byte Ed25519 seed (default: random per run)")
    parser.add_argument("--no-mdns", action="store_true", help="Do not register the service over mDNS")
    parser.add_argument("--debug", action="store_true", help="Debug logging, including hex dumps")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    logger = get_screen_logger('AirPair', level='DEBUG' if args.debug else 'INFO')

    if args.identity_seed:
        identity = LongTermIdentity.from_seed(bytes.fromhex(args.identity_seed))
    else:
        identity = LongTermIdentity.generate()
    setup_secret = bytes.fromhex(args.setup_secret) if args.setup_secret else None
    address = args.address or get_local_address()
    pi = str(uuid.uuid4())

    info = device_info(args.name, args.device_id, args.model, identity.public, pi)
    server = AirPairServer(("0.0.0.0", args.port), identity, info, setup_secret, isDebug=args.debug)

    zeroconf = None
    if not args.no_mdns:
        service = mdns_service_info(args.name, address, args.port, args.device_id, args.model, identity.public, pi)
        zeroconf = Zeroconf(ip_version=IPVersion.V4Only)
        zeroconf.register_service(service)
        logger.info(f"Registered {service.name} on {address}:{args.port}")

    logger.info(f"Long-term public key: {identity.public.hex()}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        if zeroconf:
            zeroconf.unregister_all_services()
            zeroconf.close()
        logger.info("Done")
