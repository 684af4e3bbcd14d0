# seed_links.py
"""
Bulk-create demo links through the configured link store.

Usage:
  python seed_links.py --backend sqlite --count 2000 --prefix mk --out mock_codes.jsonl
"""
import argparse
import json
import logging
import time
from datetime import datetime, timezone

from tinylink.errors import AlreadyExists
from tinylink.manager.link_manager import LinkManager
from tinylink.storage.storage_factory import get_storage

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

log = logging.getLogger("tinylink.seed")


def base62(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n > 0:
        n, r = divmod(n, 62)
        out.append(ALPHABET[r])
    return "".join(reversed(out))


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def seed(manager: LinkManager, count: int, prefix: str, start: int, out_file=None) -> int:
    """
    Create `count` links; existing codes are kept as they are.

    Every code in the range is written to `out_file` so a re-run still feeds
    read_load.py. Returns the number actually inserted.
    """
    ok = 0
    for i in range(count):
        n = start + i
        code = f"{prefix}{base62(n).rjust(6, '0')}"
        url = f"example.com/{n}"
        try:
            record = manager.create_link(code, url)
            ok += 1
        except AlreadyExists:
            record = manager.get_link(code)
        if out_file is not None:
            out_file.write(json.dumps({"code": record.code, "url": record.target_url}) + "\n")
    return ok


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--backend", default=None, help="memory, sqlite or postgres (default: env)")
    ap.add_argument("--count", type=int, default=2000, help="links to create")
    ap.add_argument("--prefix", default="mk", help="code prefix")
    ap.add_argument("--start", type=int, default=1_000_000, help="counter start")
    ap.add_argument("--out", default="mock_codes.jsonl")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO)
    start_iso = now_iso()
    t0 = time.perf_counter()

    with get_storage(args.backend) as store, open(args.out, "w", encoding="utf-8") as outf:
        ok = seed(LinkManager(store), args.count, args.prefix, args.start, outf)

    dt = time.perf_counter() - t0
    log.info("START: %s", start_iso)
    log.info("END:   %s", now_iso())
    log.info("TOTAL: %.3f s", dt)
    log.info("INSERTED: %d/%d links", ok, args.count)
    if dt > 0:
        log.info("RPS: %.1f links/s", ok / dt)


if __name__ == "__main__":
    main()
