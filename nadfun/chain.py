"""
Chain client backed by web3's asynchronous JSON-RPC stack.

Implements the ChainClient protocol: contract reads, gas estimation, signing
and broadcasting transactions through the configured Signer, receipts, log
queries and a polling log watcher used by the live streams.
"""

import asyncio
import inspect
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TransactionNotFound

from .abis import router_error_name
from .config import ChainConfig
from .exceptions import ConfigurationError, NetworkError, revert_error_for
from .interfaces import ErrorCallback, LogsCallback, RawLog, Signer, Unsubscribe
from .utils import get_logger, to_hex

logger = get_logger(__name__)

RECEIPT_POLL_INTERVAL = 0.5


def revert_reason(error: ContractLogicError) -> Optional[str]:
    """Best readable reason for a contract revert."""
    name = router_error_name(getattr(error, "data", None))
    if name:
        return name
    message = getattr(error, "message", None) or str(error)
    return message.replace("execution reverted:", "").strip() or None


class Web3ChainClient:
    """ChainClient over ``AsyncWeb3`` + ``AsyncHTTPProvider``."""

    def __init__(
        self,
        config: ChainConfig,
        signer: Optional[Signer] = None,
        w3: Optional[AsyncWeb3] = None,
    ):
        self.config = config
        self.signer = signer
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(config.rpc_url))
        self._watchers: List[asyncio.Task] = []

        logger.info(f"Chain client initialized for {config.network} ({config.chain_id})")

    async def _request(self, description: str, awaitable) -> Any:
        try:
            return await awaitable
        except ContractLogicError as e:
            reason = revert_reason(e)
            raise revert_error_for(f"{description} reverted: {reason}", reason=reason) from e
        except (OSError, asyncio.TimeoutError) as e:
            raise NetworkError(
                f"{description} failed: {e}", endpoint=self.config.rpc_url
            ) from e

    async def call(
        self, address: str, abi: Sequence[Dict[str, Any]], fn_name: str, args: Sequence[Any]
    ) -> Any:
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        function = getattr(contract.functions, fn_name)(*args)
        return await self._request(f"{fn_name} call", function.call())

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        gas = await self._request("Gas estimation", self.w3.eth.estimate_gas(tx))
        return int(gas)

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        """
        Sign and broadcast a transaction.

        Fills ``from``, ``nonce``, ``chainId``, ``gasPrice`` and ``gas`` when
        the caller left them out.
        """
        if self.signer is None:
            raise ConfigurationError("No signer configured for sending transactions")

        tx = dict(tx)
        tx["from"] = self.signer.address
        tx.setdefault("chainId", self.config.chain_id)
        tx.setdefault("value", 0)

        if tx.get("nonce") is None:
            tx["nonce"] = await self._request(
                "Nonce lookup",
                self.w3.eth.get_transaction_count(self.signer.address, "pending"),
            )
        if tx.get("gasPrice") is None and "maxFeePerGas" not in tx:
            tx["gasPrice"] = await self.get_gas_price()
        if tx.get("gas") is None:
            tx["gas"] = await self.estimate_gas(
                {k: tx[k] for k in ("from", "to", "data", "value") if k in tx}
            )

        raw = self.signer.sign_transaction(tx)
        tx_hash = await self._request(
            "Transaction submission", self.w3.eth.send_raw_transaction(raw)
        )
        tx_hash = to_hex(bytes(tx_hash))
        logger.info(f"📤 Transaction submitted: {tx_hash}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> Mapping[str, Any]:
        """Poll until mined; honours ``config.receipt_timeout`` when set."""
        if self.config.receipt_timeout:
            try:
                receipt = await asyncio.wait_for(
                    self._poll_receipt(tx_hash), self.config.receipt_timeout
                )
            except asyncio.TimeoutError as e:
                raise NetworkError(
                    f"Transaction {tx_hash} not mined after "
                    f"{self.config.receipt_timeout}s",
                    endpoint=self.config.rpc_url,
                ) from e
        else:
            receipt = await self._poll_receipt(tx_hash)

        if receipt.get("status") == 0:
            reason = await self._replay_reason(tx_hash, receipt)
            raise revert_error_for(
                f"Transaction {tx_hash} reverted" + (f": {reason}" if reason else ""),
                reason=reason,
                tx_hash=tx_hash,
            )

        logger.info(f"✅ Transaction mined: {tx_hash} (block {receipt.get('blockNumber')})")
        return receipt

    async def _poll_receipt(self, tx_hash: str) -> Mapping[str, Any]:
        while True:
            try:
                return await self._request(
                    "Receipt lookup", self.w3.eth.get_transaction_receipt(tx_hash)
                )
            except TransactionNotFound:
                await asyncio.sleep(RECEIPT_POLL_INTERVAL)

    async def _replay_reason(self, tx_hash: str, receipt: Mapping[str, Any]) -> Optional[str]:
        """Re-run a reverted transaction as a call to recover its revert reason."""
        try:
            tx = await self.w3.eth.get_transaction(tx_hash)
            await self.w3.eth.call(
                {
                    "from": tx["from"],
                    "to": tx["to"],
                    "data": tx["input"],
                    "value": tx.get("value", 0),
                },
                receipt["blockNumber"],
            )
        except ContractLogicError as e:
            return revert_reason(e)
        except Exception as e:
            logger.debug(f"Could not replay {tx_hash} for revert reason: {e}")
        return None

    async def get_logs(
        self,
        address: Union[str, Sequence[str]],
        from_block: int,
        to_block: int,
        topics: Optional[Sequence[Any]] = None,
    ) -> List[RawLog]:
        if isinstance(address, str):
            checksummed: Union[str, List[str]] = Web3.to_checksum_address(address)
        else:
            checksummed = [Web3.to_checksum_address(a) for a in address]

        filter_params: Dict[str, Any] = {
            "address": checksummed,
            "fromBlock": from_block,
            "toBlock": to_block,
        }
        if topics:
            filter_params["topics"] = list(topics)

        logs = await self._request(
            f"eth_getLogs [{from_block}, {to_block}]", self.w3.eth.get_logs(filter_params)
        )
        return list(logs)

    def subscribe_logs(
        self,
        address: str,
        on_logs: LogsCallback,
        on_error: ErrorCallback,
        topics: Optional[Sequence[Any]] = None,
        from_block: Optional[int] = None,
    ) -> Unsubscribe:
        """
        Watch logs of ``address`` by polling ``eth_getLogs``.

        Must be called from a running event loop. Polling starts at
        ``from_block`` (or after the current head) and each poll covers at
        most ``config.log_batch_size`` blocks. A failing poll is reported
        through ``on_error`` and the same range is retried on the next poll.
        """
        task = asyncio.get_running_loop().create_task(
            self._watch_logs(address, on_logs, on_error, topics, from_block)
        )
        self._watchers.append(task)

        def unsubscribe() -> None:
            if not task.done():
                task.cancel()
            if task in self._watchers:
                self._watchers.remove(task)

        return unsubscribe

    async def _watch_logs(
        self,
        address: str,
        on_logs: LogsCallback,
        on_error: ErrorCallback,
        topics: Optional[Sequence[Any]],
        from_block: Optional[int] = None,
    ) -> None:
        next_block = from_block
        while True:
            try:
                head = await self.get_block_number()
                if next_block is None:
                    next_block = head + 1
                if head >= next_block:
                    to_block = min(head, next_block + self.config.log_batch_size - 1)
                    logs = await self.get_logs(address, next_block, to_block, topics)
                    next_block = to_block + 1
                    if logs:
                        result = on_logs(logs)
                        if inspect.isawaitable(result):
                            await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                on_error(e)
            await asyncio.sleep(self.config.poll_interval)

    async def get_block(self, number: int) -> Mapping[str, Any]:
        return await self._request(f"Block {number} lookup", self.w3.eth.get_block(number))

    async def get_block_number(self) -> int:
        return int(await self._request("Block number lookup", self.w3.eth.block_number))

    async def get_balance(self, address: str) -> int:
        return int(
            await self._request(
                "Balance lookup",
                self.w3.eth.get_balance(Web3.to_checksum_address(address)),
            )
        )

    async def get_gas_price(self) -> int:
        return int(await self._request("Gas price lookup", self.w3.eth.gas_price))

    async def is_contract(self, address: str) -> bool:
        code = await self._request(
            "Code lookup", self.w3.eth.get_code(Web3.to_checksum_address(address))
        )
        return len(code) > 0

    async def close(self) -> None:
        """Stop all log watchers and close the provider session."""
        for task in list(self._watchers):
            task.cancel()
        self._watchers.clear()
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
