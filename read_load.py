"""
read_load.py - simple async load script to follow redirects

Usage:
  python read_load.py --base http://127.0.0.1:3000 --in mock_codes.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import logging
import random
import time
from datetime import datetime, timezone

import httpx

log = logging.getLogger("tinylink.load")


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _load_codes(path):
    codes = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            c = obj.get("code")
            if c:
                codes.append(c)
    return codes


async def _hit_one(client: httpx.AsyncClient, base: str, code: str) -> bool:
    try:
        r = await client.get(f"{base}/{code}", follow_redirects=False, timeout=10)
    except httpx.HTTPError:
        return False
    # Expect 302 redirect, but accept any 2xx/3xx
    return 200 <= r.status_code < 400


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:3000")
    parser.add_argument("--in", dest="codes_file", default="mock_codes.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    codes = _load_codes(args.codes_file)
    if not codes:
        log.error("No codes found in %s. Run seed_links.py first.", args.codes_file)
        return

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            nonlocal success
            async with sem:
                ok = await _hit_one(client, args.base, random.choice(codes))
                if ok:
                    success += 1

        await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    log.info("START: %s", start_iso)
    log.info("END:   %s", _now_iso())
    log.info("TOTAL: %.3f s", dt)
    log.info("OPS:   reads=%d, ok=%d, fail=%d", args.count, success, args.count - success)
    if dt > 0:
        log.info("RPS:   %.1f req/s", success / dt)


if __name__ == "__main__":
    asyncio.run(main())
