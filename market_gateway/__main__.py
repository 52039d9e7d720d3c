from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from loguru import logger

from market_gateway.handler import handler
from market_gateway.logging_utils import setup_logging


def _run_request(body: str) -> int:
    result = handler({"body": body})
    print(json.dumps(result, ensure_ascii=False))
    return 0 if result["statusCode"] < 400 else 1


def _serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("market_gateway.main:app", host=host, port=port)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="market_gateway", description="Financial data request gateway"
    )
    ap.add_argument("--debug", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    req = sub.add_parser("request", help="Handle one request body and print the envelope")
    req.add_argument("body", help='JSON request body, e.g. \'{"action":"quote","symbol":"AAPL"}\'; "-" reads stdin')

    srv = sub.add_parser("serve", help="Run the local development server")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    args = ap.parse_args(argv)
    # request keeps stderr quiet; serve reports its own startup
    default_level = "WARNING" if args.command == "request" else "INFO"
    setup_logging(force=True, level="DEBUG" if args.debug else default_level, stream=sys.stderr)

    if args.command == "request":
        body = sys.stdin.read() if args.body == "-" else args.body
        return _run_request(body)
    logger.info("serving on {}:{}", args.host, args.port)
    return _serve(args.host, args.port)


if __name__ == "__main__":
    sys.exit(main())
