"""
Hatch deployment parameters.

Defaults follow the TEC hatch configuration. Durations that the template
measures in blocks are derived from the network block time, every value can
be overridden through an environment variable named after the field
(ORG_TOKEN_NAME, HATCH_MIN_GOAL, COLLATERAL_TOKEN, ...).
"""

import os
import logging
from dataclasses import fields
from typing import Dict, Any, Optional, Mapping

from web3 import Web3

from .exceptions import ParameterError
from .models import DeploymentParameters

logger = logging.getLogger(__name__)

ONE_TOKEN = 10 ** 18
PCT_BASE = 10 ** 18
PPM = 10 ** 6

HOURS = 60 * 60
DAYS = 24 * HOURS
WEEKS = 7 * DAYS

# Seconds per block
BLOCK_TIMES = {
    'rinkeby': 15,
    'mainnet': 13,
}
DEFAULT_BLOCK_TIME = 5  # xDai

ADDRESS_FIELDS = ('collateral_token', 'ih_token', 'score_token')


def block_time_for(network: str) -> int:
    return BLOCK_TIMES.get(network, DEFAULT_BLOCK_TIME)


def default_params(block_time: int) -> Dict[str, Any]:
    """Default values for everything except the token addresses"""
    if block_time <= 0:
        raise ParameterError(f"Block time must be positive, got {block_time}")

    return {
        'org_token_name': "TEC Hatch Token",
        'org_token_symbol': "TECH",
        'support_required': 6 * PCT_BASE // 10,
        'min_acceptance_quorum': 2 * PCT_BASE // 100,
        'vote_duration_blocks': 3 * DAYS // block_time,
        'vote_buffer_blocks': 8 * HOURS // block_time,
        'vote_execution_delay_blocks': 24 * HOURS // block_time,
        'expected_raise_per_ih': ONE_TOKEN,
        'one_token': ONE_TOKEN,
        'hatch_min_goal': 5 * ONE_TOKEN,
        'hatch_max_goal': 1000 * ONE_TOKEN,
        'hatch_period': 15 * DAYS,
        'hatch_exchange_rate': 10000 * PPM // 100,
        'vesting_cliff_period': 3 * DAYS,
        'vesting_complete_period': 6 * WEEKS,
        'hatch_tribute': 5 * PCT_BASE // 100,
        'open_date': 0,
        'max_ih_rate': 100 * ONE_TOKEN,
        'tollgate_fee': 3 * ONE_TOKEN,
        'hatch_oracle_ratio': 5 * PPM,
    }


def _coerce(name: str, expected: type, raw: Any) -> Any:
    if name in ADDRESS_FIELDS:
        if not isinstance(raw, str) or not Web3.is_address(raw):
            raise ParameterError(f"{name.upper()} is not a valid address: {raw!r}")
        return Web3.to_checksum_address(raw)
    if expected is int:
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ParameterError(f"{name.upper()} must be an integer, got {raw!r}") from e
    return str(raw)


def get_params(block_time: int, env: Optional[Mapping[str, str]] = None) -> DeploymentParameters:
    """
    Resolve the full parameter bundle for a network block time.

    Args:
        block_time: Seconds per block on the target network
        env: Override source, defaults to os.environ

    Returns:
        Frozen DeploymentParameters

    Raises:
        ParameterError: a required value is missing or malformed
    """
    env = os.environ if env is None else env
    values = default_params(block_time)

    resolved = {}
    missing = []
    for field in fields(DeploymentParameters):
        raw = env.get(field.name.upper(), values.get(field.name))
        if raw is None or raw == "":
            missing.append(field.name.upper())
            continue
        resolved[field.name] = _coerce(field.name, field.type, raw)

    if missing:
        raise ParameterError(f"Missing deployment parameters: {', '.join(missing)}")

    params = DeploymentParameters(**resolved)
    logger.debug(f"Resolved deployment parameters: {params}")
    return params
