#!/usr/bin/env python3
"""
Sign an EIP-2612 permit for a router without sending a transaction.

Usage:
    python examples/permit_signature.py --config config.yaml --token 0x... --spender 0x...
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import TokenClient
from nadfun.trading import format_ether

logger = logging.getLogger("examples.permit")


async def main() -> None:
    parser = base_parser("Generate a permit signature")
    parser.add_argument("--token", required=True)
    parser.add_argument("--spender", help="Defaults to the bonding curve router")
    parser.add_argument("--validity", type=int, default=3600, help="Seconds until expiry")
    args = parser.parse_args()

    config, wallet, chain = connect(args)
    token = TokenClient(config, chain, wallet)
    spender = args.spender or config.contracts.bonding_curve_router

    try:
        metadata = await token.get_metadata(args.token)
        balance = await token.get_balance(args.token)
        logger.info(f"🪙 {metadata.name} ({metadata.symbol}) balance: {format_ether(balance)}")

        latest = await chain.get_block(await chain.get_block_number())
        deadline = int(latest["timestamp"]) + args.validity

        signature = await token.generate_permit_signature(args.token, spender, balance, deadline)
        logger.info(f"✍️  Permit for {spender}")
        logger.info(f"   nonce:    {signature.nonce}")
        logger.info(f"   deadline: {deadline}")
        logger.info(f"   v: {signature.v}")
        logger.info(f"   r: 0x{signature.r.hex()}")
        logger.info(f"   s: 0x{signature.s.hex()}")
    finally:
        await chain.close()


if __name__ == "__main__":
    asyncio.run(main())
