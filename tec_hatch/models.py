"""
Hatch Deployment Data Model
Deployment parameters, factory call arguments and the resulting addresses
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Tuple, Union

# One app id can own several proxies; a single proxy stays a plain address
AppAddress = Union[str, Tuple[str, ...]]
AppAddressMap = Mapping[bytes, AppAddress]


@dataclass(frozen=True)
class DeploymentParameters:
    """Values consumed by the three HatchTemplate transactions"""
    org_token_name: str
    org_token_symbol: str
    support_required: int
    min_acceptance_quorum: int
    vote_duration_blocks: int
    vote_buffer_blocks: int
    vote_execution_delay_blocks: int
    collateral_token: str
    ih_token: str
    expected_raise_per_ih: int
    one_token: int
    hatch_min_goal: int
    hatch_max_goal: int
    hatch_period: int
    hatch_exchange_rate: int
    vesting_cliff_period: int
    vesting_complete_period: int
    hatch_tribute: int
    open_date: int
    max_ih_rate: int
    tollgate_fee: int
    score_token: str
    hatch_oracle_ratio: int

    @property
    def voting_settings(self) -> "VotingSettings":
        return VotingSettings(
            support_required=self.support_required,
            min_acceptance_quorum=self.min_acceptance_quorum,
            vote_duration_blocks=self.vote_duration_blocks,
            vote_buffer_blocks=self.vote_buffer_blocks,
            vote_execution_delay_blocks=self.vote_execution_delay_blocks,
        )


@dataclass(frozen=True)
class VotingSettings:
    """Dandelion Voting settings, durations expressed in blocks"""
    support_required: int
    min_acceptance_quorum: int
    vote_duration_blocks: int
    vote_buffer_blocks: int
    vote_execution_delay_blocks: int

    def as_tuple(self) -> Tuple[int, int, int, int, int]:
        """Order expected by the template's uint64[5] argument"""
        return (
            self.support_required,
            self.min_acceptance_quorum,
            self.vote_duration_blocks,
            self.vote_buffer_blocks,
            self.vote_execution_delay_blocks,
        )


@dataclass(frozen=True)
class TxOneArgs:
    """Arguments of HatchTemplate.createDaoTxOne"""
    token_name: str
    token_symbol: str
    voting_settings: VotingSettings
    collateral_token: str

    def as_call_args(self) -> List[Any]:
        return [
            self.token_name,
            self.token_symbol,
            list(self.voting_settings.as_tuple()),
            self.collateral_token,
        ]


@dataclass(frozen=True)
class TxTwoArgs:
    """Arguments of HatchTemplate.createDaoTxTwo"""
    min_goal: int
    max_goal: int
    period: int
    exchange_rate: int
    vesting_cliff_period: int
    vesting_complete_period: int
    tribute: int
    open_date: int
    ih_token: str
    max_ih_rate: int
    expected_raise: int

    def as_call_args(self) -> List[Any]:
        return [
            self.min_goal,
            self.max_goal,
            self.period,
            self.exchange_rate,
            self.vesting_cliff_period,
            self.vesting_complete_period,
            self.tribute,
            self.open_date,
            self.ih_token,
            self.max_ih_rate,
            self.expected_raise,
        ]


@dataclass(frozen=True)
class TxThreeArgs:
    """Arguments of HatchTemplate.createDaoTxThree"""
    dao_id: str
    redeemable_tokens: Tuple[str, ...]
    tollgate_fee_token: str
    tollgate_fee_amount: int
    score_token: str
    hatch_oracle_ratio: int

    def as_call_args(self) -> List[Any]:
        return [
            self.dao_id,
            list(self.redeemable_tokens),
            self.tollgate_fee_token,
            self.tollgate_fee_amount,
            self.score_token,
            self.hatch_oracle_ratio,
        ]


@dataclass(frozen=True)
class HatchAppIds:
    """The six app ids registered by the template, in projection order"""
    dandelion_voting: bytes
    hatch: bytes
    impact_hours: bytes
    redemptions: bytes
    tollgate: bytes
    migration_tools: bytes

    def items(self) -> List[Tuple[str, bytes]]:
        return [(f.name, getattr(self, f.name)) for f in fields(self)]

    def values(self) -> List[bytes]:
        return [app_id for _, app_id in self.items()]


@dataclass(frozen=True)
class HatchAddresses:
    """Addresses of a fully deployed Hatch DAO"""
    dao_address: str
    dandelion_voting_address: AppAddress
    hatch_address: AppAddress
    impact_hours_address: AppAddress
    redemptions_address: AppAddress
    tollgate_address: AppAddress
    migration_tools_address: AppAddress

    def to_dict(self) -> Dict[str, Union[str, List[str]]]:
        """JSON friendly view keyed the way the hardhat tooling expects"""
        def plain(value):
            return list(value) if isinstance(value, tuple) else value

        return {
            'daoAddress': self.dao_address,
            'dandelionVotingAddress': plain(self.dandelion_voting_address),
            'hatchAddress': plain(self.hatch_address),
            'impactHoursAddress': plain(self.impact_hours_address),
            'redemptionsAddress': plain(self.redemptions_address),
            'tollgateAddress': plain(self.tollgate_address),
            'migrationToolsAddress': plain(self.migration_tools_address),
        }


def compute_expected_raise(raise_per_ih: int, total_impact_hours: int, one_token: int) -> int:
    """Expected hatch raise for the current Impact Hours supply, truncated"""
    return raise_per_ih * total_impact_hours // one_token
