#!/usr/bin/env python3
"""
Print bonding curve events as they are mined.

Usage:
    python examples/curve_stream.py --config config.yaml --events Create CurveBuy
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import CurveEventType, CurveStream

logger = logging.getLogger("examples.curve_stream")


async def main() -> None:
    parser = base_parser("Stream bonding curve events")
    parser.add_argument(
        "--events",
        nargs="*",
        choices=[t.value for t in CurveEventType],
        help="Event types to show (all when omitted)",
    )
    parser.add_argument("--tokens", nargs="*", help="Only show these tokens")
    args = parser.parse_args()

    config, _, chain = connect(args, with_wallet=False)
    stream = CurveStream(config, chain)
    if args.events:
        stream.subscribe_events(CurveEventType(e) for e in args.events)
    if args.tokens:
        stream.filter_tokens(args.tokens)

    stream.on_event(
        lambda event: logger.info(f"📡 {event.type.value} {event.token} block={event.block_number}")
    )
    stream.on_error(lambda error: logger.warning(f"⚠️ Stream error: {error}"))

    await stream.start()
    try:
        while True:
            await asyncio.sleep(30)
            logger.info(f"📊 {stream.get_stats()}")
    finally:
        stream.stop()
        await chain.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
