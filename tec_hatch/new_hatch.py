#!/usr/bin/env python3
"""
Hatch DAO deployment.

Drives the HatchTemplate through its three creation transactions and reads
the resulting app addresses back from the DAO kernel.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .chain import ChainClient
from .events import build_hatch_addresses, collect_app_proxies, fetch_app_ids, resolve_address
from .exceptions import DeploymentStateError
from .models import (
    DeploymentParameters,
    HatchAddresses,
    TxOneArgs,
    TxTwoArgs,
    TxThreeArgs,
    compute_expected_raise,
)

logger = logging.getLogger(__name__)


class DeploymentStage(Enum):
    TX_ONE = 1
    TX_TWO = 2
    TX_THREE = 3
    DONE = 4


class HatchDeployer:
    """
    Runs one Hatch deployment against an already deployed HatchTemplate.

    Each step waits for its transaction to be mined before the next one can
    start, and no step can be repeated. A failed run is redone from scratch
    with a new dao_id.
    """

    def __init__(
        self,
        client: ChainClient,
        template,
        params: DeploymentParameters,
        dao_id: str,
        log: Optional[Callable[[str], None]] = None,
        event_timeout: float = 120,
        event_poll_interval: float = 2,
    ):
        self.client = client
        self.template = template
        self.params = params
        self.dao_id = dao_id
        self.log = log or logger.info
        self.event_timeout = event_timeout
        self.event_poll_interval = event_poll_interval

        self.stage = DeploymentStage.TX_ONE
        self.dao_address: Optional[str] = None
        self.dao_block: Optional[int] = None

    def _require(self, stage: DeploymentStage):
        if self.stage is not stage:
            raise DeploymentStateError(
                f"Cannot run {stage.name} while deployment is at {self.stage.name}"
            )

    def create_dao_tx_one(self) -> str:
        """Creates the DAO with Dandelion Voting and the Token Manager."""
        self._require(DeploymentStage.TX_ONE)
        params = self.params

        args = TxOneArgs(
            token_name=params.org_token_name,
            token_symbol=params.org_token_symbol,
            voting_settings=params.voting_settings,
            collateral_token=params.collateral_token,
        )
        receipt = self.client.transact(
            self.template.functions.createDaoTxOne(*args.as_call_args()), "Tx one"
        )

        dao_address = resolve_address(
            self.template,
            "DeployDao",
            receipt['transactionHash'],
            from_block=receipt['blockNumber'],
            timeout=self.event_timeout,
            poll_interval=self.event_poll_interval,
        )

        self.log(f"Tx one completed: Hatch DAO ({dao_address}) created. Dandelion Voting and Token Manager set up.")

        self.dao_address = dao_address
        self.dao_block = receipt['blockNumber']
        self.stage = DeploymentStage.TX_TWO
        return dao_address

    def expected_raise(self) -> int:
        """Expected raise for the Impact Hours supply as of now."""
        impact_hours_token = self.client.contract_at("MiniMeToken", self.params.ih_token)
        total_impact_hours = self.client.call(impact_hours_token.functions.totalSupply())
        return compute_expected_raise(
            self.params.expected_raise_per_ih, total_impact_hours, self.params.one_token
        )

    def create_dao_tx_two(self):
        """Sets up the Impact Hours and Hatch apps."""
        self._require(DeploymentStage.TX_TWO)
        params = self.params

        args = TxTwoArgs(
            min_goal=params.hatch_min_goal,
            max_goal=params.hatch_max_goal,
            period=params.hatch_period,
            exchange_rate=params.hatch_exchange_rate,
            vesting_cliff_period=params.vesting_cliff_period,
            vesting_complete_period=params.vesting_complete_period,
            tribute=params.hatch_tribute,
            open_date=params.open_date,
            ih_token=params.ih_token,
            max_ih_rate=params.max_ih_rate,
            expected_raise=self.expected_raise(),
        )
        tx_hash = self.client.send(
            self.template.functions.createDaoTxTwo(*args.as_call_args()), "Tx two"
        )

        self.log("Tx two completed: Impact Hours app and Hatch app set up.")

        self.client.wait(tx_hash, "Tx two")
        self.stage = DeploymentStage.TX_THREE

    def create_dao_tx_three(self):
        """Sets up Tollgate, Hatch Oracle, Redemptions and Migration Tools."""
        self._require(DeploymentStage.TX_THREE)
        params = self.params

        args = TxThreeArgs(
            dao_id=self.dao_id,
            redeemable_tokens=(params.collateral_token,),
            tollgate_fee_token=params.collateral_token,
            tollgate_fee_amount=params.tollgate_fee,
            score_token=params.score_token,
            hatch_oracle_ratio=params.hatch_oracle_ratio,
        )
        self.client.transact(
            self.template.functions.createDaoTxThree(*args.as_call_args()), "Tx three"
        )

        self.log("Tx three completed: Tollgate, Hatch Oracle, Redemptions and Migration Tools apps set up.")

        self.stage = DeploymentStage.DONE

    def app_addresses(self) -> HatchAddresses:
        """Reads the app proxies of the deployed DAO. Read only, safe to repeat."""
        self._require(DeploymentStage.DONE)

        app_ids = fetch_app_ids(self.template)
        dao = self.client.contract_at("Kernel", self.dao_address)
        apps = collect_app_proxies(dao, app_ids.values(), from_block=self.dao_block)
        return build_hatch_addresses(self.dao_address, app_ids, apps)

    def deploy(self) -> HatchAddresses:
        self.create_dao_tx_one()
        self.create_dao_tx_two()
        self.create_dao_tx_three()
        return self.app_addresses()
