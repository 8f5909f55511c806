#!/usr/bin/env python3
"""
Buy every newly created token that passes the filters.

Usage:
    python examples/sniper.py --config config.yaml --amount 0.01 --slippage 10
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import SniperBot, SniperConfig
from nadfun.trading import parse_ether

logger = logging.getLogger("examples.sniper")


async def main() -> None:
    parser = base_parser("Snipe new token launches")
    parser.add_argument("--amount", default="0.01", help="MON per buy")
    parser.add_argument("--slippage", type=float, default=10.0)
    parser.add_argument("--interval-ms", type=int, default=1000, help="Minimum gap between buys")
    parser.add_argument("--blacklist", nargs="*", default=[])
    parser.add_argument("--dry-run", action="store_true", help="Log creates without buying")
    args = parser.parse_args()

    config, wallet, chain = connect(args)
    bot = SniperBot(
        config,
        chain,
        wallet,
        SniperConfig(
            buy_amount=parse_ether(args.amount),
            slippage_percent=args.slippage,
            min_buy_interval=args.interval_ms,
            token_blacklist=args.blacklist,
            auto_buy=not args.dry_run,
        ),
    )
    bot.on_buy_success(lambda event, tx_hash: logger.info(f"🎯 {event.symbol}: {tx_hash}"))
    bot.on_buy_error(lambda event, error: logger.error(f"❌ {event.symbol}: {error}"))

    await bot.start()
    try:
        while True:
            await asyncio.sleep(60)
            logger.info(f"📊 {bot.get_stats()}")
    finally:
        bot.stop()
        await chain.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
