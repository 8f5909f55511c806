#!/usr/bin/env python3
"""
Estimate gas for buy, sell and sellPermit of one token.

Usage:
    python examples/gas_estimation.py --config config.yaml --token 0x... --amount 0.1
"""

import asyncio
import logging

from common import base_parser, connect
from nadfun import (
    BuyGasParams,
    RevertError,
    SellGasParams,
    SellPermitGasParams,
    TokenClient,
    TradeExecutor,
)
from nadfun.trading import (
    DEFAULT_GAS_BUFFERS,
    OperationKind,
    apply_gas_buffer,
    min_amount_out,
    parse_ether,
)

logger = logging.getLogger("examples.gas")


async def main() -> None:
    parser = base_parser("Estimate router gas")
    parser.add_argument("--token", required=True)
    parser.add_argument("--amount", default="0.1", help="MON in for the buy estimate")
    args = parser.parse_args()

    config, wallet, chain = connect(args)
    trade = TradeExecutor(config, chain)
    token = TokenClient(config, chain, wallet)
    deadline = int(trade.time_provider.current_timestamp()) + 300

    try:
        amount_in = parse_ether(args.amount)
        quote = await trade.quote_out(args.token, amount_in, True)
        buy_gas = await trade.estimate_gas(
            quote.router,
            BuyGasParams(
                token=args.token,
                to=wallet.address,
                amount_in=amount_in,
                amount_out_min=min_amount_out(quote.amount, 5.0),
                deadline=deadline,
            ),
        )
        report = {OperationKind.BUY: buy_gas}

        balance = await token.get_balance(args.token)
        if balance > 0:
            sell_quote = await trade.quote_out(args.token, balance, False)
            amount_out_min = min_amount_out(sell_quote.amount, 5.0)
            try:
                report[OperationKind.SELL] = await trade.estimate_gas(
                    sell_quote.router,
                    SellGasParams(
                        token=args.token,
                        to=wallet.address,
                        amount_in=balance,
                        amount_out_min=amount_out_min,
                        deadline=deadline,
                    ),
                )
            except RevertError as e:
                logger.warning(f"⚠️ Sell estimate reverted (approve the router first): {e}")

            permit = await token.generate_permit_signature(
                args.token, sell_quote.router, balance, deadline
            )
            report[OperationKind.SELL_PERMIT] = await trade.estimate_gas(
                sell_quote.router,
                SellPermitGasParams(
                    token=args.token,
                    to=wallet.address,
                    amount_in=balance,
                    amount_out_min=amount_out_min,
                    amount_allowance=balance,
                    deadline=deadline,
                    v=permit.v,
                    r=permit.r,
                    s=permit.s,
                ),
            )

        for kind, gas in report.items():
            buffered = apply_gas_buffer(gas, DEFAULT_GAS_BUFFERS[kind])
            logger.info(f"⛽ {kind.value}: {gas:,} (with buffer {buffered:,})")
    finally:
        await chain.close()


if __name__ == "__main__":
    asyncio.run(main())
