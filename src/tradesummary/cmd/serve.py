"""
Serve the report generator over HTTP.

Usage
-----
    python -m tradesummary.cmd.serve --host 127.0.0.1 --port 8085

    curl --data-binary @trades.csv -o summary.xlsx http://127.0.0.1:8085/parsing
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from tradesummary.config import Settings
from tradesummary.logging import configure_logging
from tradesummary.service.app import create_app


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="HTTP endpoint for trade summaries")
    p.add_argument("--host", type=str, default="127.0.0.1")
    p.add_argument("--port", type=int, default=8085)
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_argparser().parse_args(argv)
    configure_logging(level=logging.INFO)
    api = create_app(Settings.from_env())
    uvicorn.run(api, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
