"""Shared setup for the example scripts."""

import argparse
import logging

from nadfun import Wallet, Web3ChainClient, load_config
from nadfun.utils import setup_logging


def base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", help="YAML config (defaults to $NADFUN_CONFIG)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def connect(args, with_wallet: bool = True):
    """Config, optional wallet and chain client from parsed arguments."""
    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    config = load_config(args.config)
    wallet = Wallet.from_env() if with_wallet else None
    return config, wallet, Web3ChainClient(config, wallet)
