#!/usr/bin/env python3
"""
Fetch historical bonding curve events over a block range.

Usage:
    python examples/curve_indexer.py --config config.yaml --blocks 5000 --events Create
"""

import asyncio
import logging
from collections import Counter

from common import base_parser, connect
from nadfun import CurveEventType, CurveIndexer

logger = logging.getLogger("examples.curve_indexer")


async def main() -> None:
    parser = base_parser("Index bonding curve history")
    parser.add_argument("--blocks", type=int, default=1000, help="How far back from head")
    parser.add_argument("--batch-size", type=int, help="Blocks per log query")
    parser.add_argument("--events", nargs="*", choices=[t.value for t in CurveEventType])
    args = parser.parse_args()

    config, _, chain = connect(args, with_wallet=False)
    indexer = CurveIndexer(config, chain)

    try:
        head = await chain.get_block_number()
        start = max(0, head - args.blocks)
        event_types = [CurveEventType(e) for e in args.events] if args.events else None

        events = await indexer.fetch_all_events(start, args.batch_size, event_types=event_types)
        logger.info(f"🔍 {len(events)} events in blocks {start}..{head}")

        for event_type, count in sorted(Counter(e.type.value for e in events).items()):
            logger.info(f"   {event_type}: {count}")
        for event in events[-10:]:
            logger.info(f"   #{event.block_number} {event.type.value} {event.token}")
    finally:
        await chain.close()


if __name__ == "__main__":
    asyncio.run(main())
