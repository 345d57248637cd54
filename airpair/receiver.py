import socket
import traceback
import socketserver
import http.server

from biplist import Data, writePlistToString
from hexdump import hexdump
from zeroconf import ServiceInfo

from .pairing import Hap, PairingError, PairVerifyState
from .utils import get_screen_logger

SERVER_VERSION = "366.0"
HTTP_CT_BPLIST = "application/x-apple-binary-plist"
HTTP_CT_OCTET = "application/octet-stream"

FEATURES = 0x1C340445F8A00
STATUS_FLAGS = 0x4
PROTOCOL_VERSION = "1.1"
MDNS_TYPE = "_airplay._tcp.local."


class RtspStatus:
    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    AUTH_REQUIRED = 470
    INTERNAL_ERROR = 500

    MESSAGES = {
        OK: "OK",
        BAD_REQUEST: "Bad Request",
        NOT_FOUND: "Not Found",
        AUTH_REQUIRED: "Connection Authorization Required",
        INTERNAL_ERROR: "Internal Server Error",
    }


def device_info(name, device_id, model, public_key, pi):
    """Static descriptor answered on GET /info."""
    return {
        "build": "17.0",
        "deviceID": device_id,
        "features": FEATURES,
        "firmwareBuildDate": "Jan 30 2019",
        "firmwareRevision": "1.505.130",
        "keepAliveLowPower": True,
        "keepAliveSendStatsAsBody": True,
        "manufacturer": "airpair",
        "model": model,
        "name": name,
        "nameIsFactoryDefault": False,
        "pi": pi,
        "pk": Data(public_key),
        "protocolVersion": PROTOCOL_VERSION,
        "PTPInfo": "OpenAVNU ArtAndLogic-aPTP-changes 1.0",
        "sdk": "AirPlay;2.0.2",
        "sourceVersion": SERVER_VERSION,
        "statusFlags": STATUS_FLAGS,
    }


def mdns_service_info(name, address, port, device_id, model, public_key, pi):
    props = {
        "deviceid": device_id,
        "features": "0x%X,0x%X" % (FEATURES & 0xffffffff, FEATURES >> 32),
        "flags": "0x%x" % STATUS_FLAGS,
        "model": model,
        "pk": public_key.hex(),
        "pi": pi,
        "protovers": PROTOCOL_VERSION,
        "rmodel": "PC1.0",
        "rrv": "1.01",
        "rsv": "1.00",
        "srcvers": SERVER_VERSION,
        "vv": "2",
    }
    return ServiceInfo(
        MDNS_TYPE,
        "%s.%s" % (name, MDNS_TYPE),
        addresses=[socket.inet_aton(address)],
        port=port,
        properties=props,
        server="%s.local." % name.replace(" ", "-"),
    )


class AirPairHandler(http.server.BaseHTTPRequestHandler):
    """RTSP framing around the pairing core. One instance per connection."""

    protocol_version = "RTSP/1.0"

    def version_string(self):
        return "AirTunes/%s" % SERVER_VERSION

    def parse_request(self):
        self.raw_requestline = self.raw_requestline.replace(b"RTSP/1.0", b"HTTP/1.1")
        r = http.server.BaseHTTPRequestHandler.parse_request(self)
        self.protocol_version = "RTSP/1.0"
        self.close_connection = False
        return r

    def log_message(self, format, *args):
        self.server.logger.debug("%s %s" % (self.address_string(), format % args))

    def read_body(self):
        """Request body, or None when Content-Length is unusable."""
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            return None
        if length < 0:
            return None
        body = self.rfile.read(length) if length else b''
        if body:
            self.server.logger.debug(hexdump(body, result='return'))
        return body

    def refuse_body(self):
        # The body cannot be skipped, so the stream is out of sync from here.
        self.server.logger.info("Bad Content-Length from %s: %r" % (self.address_string(), self.headers.get("Content-Length")))
        self.close_connection = True
        self.send_rtsp(RtspStatus.BAD_REQUEST)

    def send_rtsp(self, code, body=b'', content_type=HTTP_CT_OCTET):
        self.send_response(code, RtspStatus.MESSAGES.get(code, ''))
        if "CSeq" in self.headers:
            self.send_header("CSeq", self.headers["CSeq"])
        if body:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", len(body))
        self.end_headers()
        if body:
            self.wfile.write(body)

    def do_GET(self):
        self.server.logger.info("GET %s" % self.path)
        body = self.read_body()
        if body is None:
            self.refuse_body()
        elif self.path == "/info":
            self.send_rtsp(RtspStatus.OK, writePlistToString(self.server.device_info), HTTP_CT_BPLIST)
        else:
            self.send_rtsp(RtspStatus.NOT_FOUND)

    def do_POST(self):
        self.server.logger.info("POST %s" % self.path)
        body = self.read_body()
        if body is None:
            self.refuse_body()
            return
        try:
            if self.path == "/pair-setup":
                self.handle_pair_setup()
            elif self.path == "/pair-verify":
                self.handle_pair_verify(body)
            else:
                self.send_rtsp(RtspStatus.BAD_REQUEST)
        except PairingError as e:
            self.server.logger.info("Pairing with %s failed: %s" % (self.address_string(), e))
            self.send_rtsp(RtspStatus.AUTH_REQUIRED)
        except Exception:
            self.server.logger.error("Error handling %s:\n%s" % (self.path, traceback.format_exc()))
            self.send_rtsp(RtspStatus.INTERNAL_ERROR)

    def handle_pair_setup(self):
        if self.server.setup_secret is None:
            self.server.logger.error("pair-setup requested but no setup secret is configured")
            self.send_rtsp(RtspStatus.BAD_REQUEST)
            return
        self.send_rtsp(RtspStatus.OK, self.server.hap.pair_setup(self.server.setup_secret))

    def handle_pair_verify(self, body):
        hap = self.server.hap
        res = hap.pair_verify(self.client_address, body)
        if hap.session(self.client_address).state is PairVerifyState.FAILED:
            self.send_rtsp(RtspStatus.AUTH_REQUIRED)
        else:
            self.send_rtsp(RtspStatus.OK, res)

    def finish(self):
        try:
            http.server.BaseHTTPRequestHandler.finish(self)
        finally:
            self.server.hap.close(self.client_address)


class AirPairServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, identity, device_info, setup_secret=None, isDebug=False):
        self.hap = Hap(identity, isDebug=isDebug)
        self.device_info = device_info
        self.setup_secret = setup_secret
        level = 'DEBUG' if isDebug else 'INFO'
        self.logger = get_screen_logger('Receiver', level=level)
        socketserver.TCPServer.__init__(self, address, AirPairHandler)
