from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="docpipe-worker",
        description="Consume document-processing messages and write result records",
    )
    p.add_argument(
        "--concurrency",
        type=int,
        default=0,
        help="Override DOCPIPE_WORKER_CONCURRENCY",
    )
    p.add_argument("--once", action="store_true", help="Receive one batch, process it and exit")
    p.add_argument(
        "--max-messages",
        type=int,
        default=0,
        help="Exit after this many deliveries (0 = run until interrupted)",
    )
    p.add_argument(
        "--create-queue",
        action="store_true",
        help="Create the queue and its dead-letter queue before consuming",
    )
    p.add_argument("--log-level", default="INFO", help="Python logging level (INFO, DEBUG, ...)")
    return p
