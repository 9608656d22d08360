# The MIT License (MIT)
# Copyright © 2023 Yuma Rao
# Copyright © 2023 Opentensor Foundation

# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:

# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software.

# THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO
# THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION
# OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
# DEALINGS IN THE SOFTWARE.

import argparse
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from poolcoord.ledger.models import OutputRef
from poolcoord.ledger.networks import NETWORKS, NetworkParams, get_network

REQUIRED_ENV = (
    "NETWORK",
    "LEDGER_GATEWAY_URL",
    "POOL_CONTRACT_ADDRESS",
    "POOL_SCRIPT_HASH",
    "POOL_OUTPUT_REFERENCE",
)


class ConfigError(Exception):
    """Required configuration is missing or malformed."""


class PoolSettings(BaseModel):
    """Validated coordinator settings."""

    network: str
    ledger_gateway_url: str = Field(min_length=1)
    pool_contract_address: str = Field(min_length=1)
    pool_script_hash: str = Field(min_length=1)
    pool_output_reference: OutputRef
    host: str = "0.0.0.0"
    port: int = Field(default=22123, gt=0, lt=65536)
    cache_hydration_interval: float = Field(default=5.0, gt=0)
    submit_timeout: float = Field(default=2.0, gt=0)

    @field_validator("network")
    @classmethod
    def _known_network(cls, v: str) -> str:
        if v not in NETWORKS:
            raise ValueError(f"NETWORK must be one of {sorted(NETWORKS)}")
        return v

    @field_validator("pool_output_reference", mode="before")
    @classmethod
    def _parse_reference(cls, v):
        if isinstance(v, str):
            return OutputRef.parse(v)
        return v

    @property
    def network_params(self) -> NetworkParams:
        return get_network(self.network)


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Adds coordinator arguments to the parser. Environment variables take precedence.
    """
    parser.add_argument(
        "--network",
        type=str,
        help="Ledger network (Mainnet or Preview).",
        default=None,
    )
    parser.add_argument(
        "--gateway.url",
        type=str,
        help="Base URL of the ledger gateway.",
        default=None,
    )
    parser.add_argument(
        "--server.host",
        type=str,
        help="Interface the submission server binds to.",
        default=None,
    )
    parser.add_argument(
        "--server.port",
        type=int,
        help="Port the submission server listens on.",
        default=None,
    )
    parser.add_argument(
        "--cache.hydration_interval",
        type=float,
        help="Seconds between owner datum cache refreshes.",
        default=None,
    )
    parser.add_argument(
        "--submit.timeout",
        type=float,
        help="Seconds to wait for a transaction id before retrying.",
        default=None,
    )


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    args: Optional[argparse.Namespace] = None,
) -> PoolSettings:
    """Build settings from the environment, falling back to CLI arguments.

    Raises:
        ConfigError: If a required value is missing or fails validation.
    """
    env = os.environ if env is None else env

    def _pick(env_key: str, arg_key: str):
        value = env.get(env_key)
        if value:
            return value
        if args is not None:
            return getattr(args, arg_key, None)
        return None

    raw = {
        "network": _pick("NETWORK", "network"),
        "ledger_gateway_url": _pick("LEDGER_GATEWAY_URL", "gateway.url"),
        "pool_contract_address": env.get("POOL_CONTRACT_ADDRESS"),
        "pool_script_hash": env.get("POOL_SCRIPT_HASH"),
        "pool_output_reference": env.get("POOL_OUTPUT_REFERENCE"),
        "host": _pick("SUBMISSION_SERVER_HOST", "server.host"),
        "port": _pick("SUBMISSION_SERVER_PORT", "server.port"),
        "cache_hydration_interval": _pick("CACHE_HYDRATION_INTERVAL", "cache.hydration_interval"),
        "submit_timeout": _pick("SUBMIT_TIMEOUT", "submit.timeout"),
    }

    missing = [key for key in REQUIRED_ENV if not raw[key.lower()]]
    if missing:
        raise ConfigError(f"missing required settings: {', '.join(missing)}")

    try:
        return PoolSettings(**{k: v for k, v in raw.items() if v is not None})
    except ValidationError as e:
        raise ConfigError(str(e)) from e
