"""`python -m envfeed` serves the viewer with uvicorn."""

from __future__ import annotations

import argparse
import sys

import uvicorn

from envfeed.config import HOST, LOG_LEVEL, PORT


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="python -m envfeed")
    p.add_argument("--host", default=HOST)
    p.add_argument("--port", type=int, default=PORT)
    args = p.parse_args(argv)

    # one process only: the feed store lives in process memory
    uvicorn.run("envfeed.main:app", host=args.host, port=args.port, workers=1, log_level=LOG_LEVEL.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
