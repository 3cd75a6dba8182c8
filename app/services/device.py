#app/services/device.py
import base64, hashlib, json, time
from typing import Mapping, Optional

FINGERPRINT_LENGTH = 16
MAX_DEVICE_ID_LENGTH = 32
SERVER_ONLY_PREFIX = "server_"

def fingerprint(headers: Mapping[str, str], user_agent: Optional[str] = None) -> str:
    """Server-side device fingerprint from request headers.

    Advisory only (soft duplicate/abuse signal). The timestamp makes it differ
    between submissions, so it never identifies a device on its own.
    """
    doc = {
        "userAgent": user_agent or headers.get("user-agent") or "",
        "acceptLanguage": headers.get("accept-language") or "",
        "acceptEncoding": headers.get("accept-encoding") or "",
        "connection": headers.get("connection") or "",
        "dnt": headers.get("dnt") or "",
        "sec_fetch_site": headers.get("sec-fetch-site") or "",
        "sec_fetch_mode": headers.get("sec-fetch-mode") or "",
        "sec_fetch_dest": headers.get("sec-fetch-dest") or "",
        "timestamp": int(time.time() * 1000),
    }
    digest = hashlib.sha256(json.dumps(doc).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")[:FINGERPRINT_LENGTH]

def combine(server_fp: str, client_fp: Optional[str] = None) -> str:
    if not client_fp:
        return f"{SERVER_ONLY_PREFIX}{server_fp}"
    return f"{server_fp}_{client_fp}"[:MAX_DEVICE_ID_LENGTH]
