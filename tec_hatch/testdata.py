"""Shared values for the test modules"""

from tec_hatch.models import DeploymentParameters

COLLATERAL = "0xabc0000000000000000000000000000000000abc"
IH_TOKEN = "0x1111111111111111111111111111111111111111"
SCORE_TOKEN = "0x2222222222222222222222222222222222222222"


def make_params(**overrides) -> DeploymentParameters:
    values = dict(
        org_token_name="Test",
        org_token_symbol="TST",
        support_required=500000,
        min_acceptance_quorum=150000,
        vote_duration_blocks=3000,
        vote_buffer_blocks=300,
        vote_execution_delay_blocks=1000,
        collateral_token=COLLATERAL,
        ih_token=IH_TOKEN,
        expected_raise_per_ih=2 * 10 ** 18,
        one_token=10 ** 18,
        hatch_min_goal=5 * 10 ** 18,
        hatch_max_goal=1000 * 10 ** 18,
        hatch_period=15 * 86400,
        hatch_exchange_rate=100000000,
        vesting_cliff_period=3 * 86400,
        vesting_complete_period=42 * 86400,
        hatch_tribute=5 * 10 ** 16,
        open_date=0,
        max_ih_rate=100 * 10 ** 18,
        tollgate_fee=3 * 10 ** 18,
        score_token=SCORE_TOKEN,
        hatch_oracle_ratio=5000000,
    )
    values.update(overrides)
    return DeploymentParameters(**values)
