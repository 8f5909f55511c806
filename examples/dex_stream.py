#!/usr/bin/env python3
"""
Stream swaps on the DEX pools of graduated tokens.

Usage:
    python examples/dex_stream.py --config config.yaml --tokens 0x... 0x...
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import DexStream

logger = logging.getLogger("examples.dex_stream")


def log_swap(event) -> None:
    # Positive amounts flow into the pool
    direction = "1->0" if event.amount1 > 0 else "0->1"
    logger.info(
        f"🔄 {event.pool} {direction} amount0={event.amount0} amount1={event.amount1} "
        f"block={event.block_number}"
    )


async def main() -> None:
    parser = base_parser("Stream DEX swaps for tokens")
    parser.add_argument("--tokens", nargs="+", required=True)
    args = parser.parse_args()

    config, _, chain = connect(args, with_wallet=False)
    try:
        stream = await DexStream.discover_pools_for_tokens(config, chain, args.tokens)
        pools = stream.get_pool_addresses()
        if not pools:
            logger.error("❌ No pools found; tokens may not be listed yet")
            return

        logger.info(f"🏊 Watching {len(pools)} pools")
        stream.on_swap(log_swap)
        await stream.start()
        try:
            while True:
                await asyncio.sleep(30)
                logger.info(f"📊 {stream.get_reconnection_status()['state']} {stream.get_stats()}")
        finally:
            stream.stop()
    finally:
        await chain.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
