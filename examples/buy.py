#!/usr/bin/env python3
"""
Buy a token on its current router (bonding curve or DEX).

Usage:
    python examples/buy.py --config config.yaml --token 0x... --amount 0.1 --slippage 5
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import BuyParams, TradeExecutor
from nadfun.trading import format_ether, min_amount_out, parse_ether

logger = logging.getLogger("examples.buy")


async def main() -> None:
    parser = base_parser("Buy tokens with MON")
    parser.add_argument("--token", required=True)
    parser.add_argument("--amount", default="0.1", help="MON to spend")
    parser.add_argument("--slippage", type=float, default=5.0)
    args = parser.parse_args()

    config, wallet, chain = connect(args)
    trade = TradeExecutor(config, chain)
    amount_in = parse_ether(args.amount)

    try:
        balance = await chain.get_balance(wallet.address)
        logger.info(f"💰 Balance: {format_ether(balance)} MON")
        if balance < amount_in:
            logger.error("❌ Insufficient balance")
            return

        listed = await trade.is_listed(args.token)
        logger.info(f"📊 Token listed: {'yes (DEX)' if listed else 'no (bonding curve)'}")

        quote = await trade.quote_out(args.token, amount_in, True)
        minimum = min_amount_out(quote.amount, args.slippage)
        logger.info(f"📈 Quote: {format_ether(quote.amount)} tokens (min {format_ether(minimum)})")

        tx_hash = await trade.buy(
            BuyParams(
                token=args.token,
                to=wallet.address,
                amount_in=amount_in,
                amount_out_min=minimum,
            ),
            quote.router,
        )
        logger.info(f"✅ Bought: {tx_hash}")
    finally:
        await chain.close()


if __name__ == "__main__":
    asyncio.run(main())
