#!/usr/bin/env python3
"""
Run a buy followed by a permit sell of the received tokens.

Usage:
    python examples/bundler.py --config config.yaml --token 0x... --amount 0.05
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import BundledOperation, BundlerBot, BundlerConfig, TokenClient
from nadfun.trading import parse_ether

logger = logging.getLogger("examples.bundler")


async def main() -> None:
    parser = base_parser("Execute a bundle of trades")
    parser.add_argument("--token", required=True)
    parser.add_argument("--amount", default="0.05", help="MON to buy with")
    parser.add_argument("--slippage", type=float, default=5.0)
    args = parser.parse_args()

    config, wallet, chain = connect(args)
    bot = BundlerBot(config, chain, wallet, BundlerConfig(default_slippage_percent=args.slippage))
    token = TokenClient(config, chain, wallet)

    try:
        before = await token.get_balance(args.token)
        results = await bot.execute(
            [BundledOperation(type="buy", token=args.token, amount_in=parse_ether(args.amount))]
        )
        received = await token.get_balance(args.token) - before
        if results[0].success and received > 0:
            results += await bot.execute(
                [BundledOperation(type="sellPermit", token=args.token, amount_in=received)]
            )

        summary = bot.summarize(results)
        logger.info(f"📦 {summary.successful}/{summary.total} operations succeeded")
        for result in results:
            status = result.tx_hash if result.success else result.error
            logger.info(f"   {result.operation.type}: {status}")
    finally:
        await chain.close()


if __name__ == "__main__":
    asyncio.run(main())
