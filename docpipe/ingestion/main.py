from __future__ import annotations

import asyncio
import logging
import signal

from docpipe.analysis.base import build_analyzer
from docpipe.config import PipelineConfig
from docpipe.ingestion.cli import build_parser
from docpipe.ingestion.listener import QueueListener
from docpipe.ingestion.worker import DocumentWorker
from docpipe.logging_config import setup_logging
from docpipe.stores.blob_store import BlobStore
from docpipe.stores.work_queue import WorkQueue


async def _amain() -> int:
    parser = build_parser()
    args = parser.parse_args()

    cfg = PipelineConfig.from_env()
    setup_logging(level=args.log_level.upper(), json_logs=cfg.json_logs)
    logger = logging.getLogger("docpipe.ingestion")
    cfg.validate()

    # CLI overrides
    concurrency = args.concurrency if args.concurrency and args.concurrency > 0 else cfg.worker_concurrency

    queue = WorkQueue.from_config(cfg)
    if args.create_queue:
        queue.ensure(
            dead_letter_queue_name=cfg.dead_letter_queue_name,
            max_receive_count=cfg.max_receive_count,
            visibility_timeout=cfg.visibility_timeout_seconds,
        )

    worker = DocumentWorker(
        blob_store=BlobStore.from_config(cfg),
        analyzer=build_analyzer(cfg),
        reading_wpm=cfg.reading_wpm,
    )
    listener = QueueListener(
        queue=queue,
        worker=worker,
        concurrency=concurrency,
        wait_seconds=cfg.wait_time_seconds,
        visibility_timeout=cfg.visibility_timeout_seconds,
        max_receive_count=cfg.max_receive_count,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, listener.stop)

    totals = await listener.run(once=bool(args.once), max_messages=int(args.max_messages or 0))
    logger.info("DONE totals=%s", totals)
    return 0 if totals["failed"] == 0 else 2


def main() -> None:
    raise SystemExit(asyncio.run(_amain()))


if __name__ == "__main__":
    main()
