# File: app/core/ids.py
import os, threading, time, uuid

_lock = threading.Lock()
_last_ms = 0
_seq = 0

def new_id() -> str:
    """Time-ordered UUID (version 7 layout), 36 chars.

    48-bit unix ms timestamp, then a 12-bit per-millisecond sequence, then 62
    random bits. Ids minted by one process compare in creation order as strings.
    """
    global _last_ms, _seq
    with _lock:
        ms = time.time_ns() // 1_000_000
        if ms > _last_ms:
            _last_ms = ms
            _seq = int.from_bytes(os.urandom(2), "big") & 0x3FF
        else:
            _seq += 1
            if _seq > 0xFFF:
                # sequence exhausted; borrow the next millisecond
                _last_ms += 1
                _seq = 0
        ms, seq = _last_ms, _seq
    rand = int.from_bytes(os.urandom(8), "big") & ((1 << 62) - 1)
    value = (ms & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= seq << 64
    value |= 0b10 << 62
    value |= rand
    return str(uuid.UUID(int=value))
