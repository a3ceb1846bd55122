import pytest

from tec_hatch.models import HatchAppIds
from tec_hatch.testdata import make_params


@pytest.fixture
def params():
    return make_params()


@pytest.fixture
def app_ids():
    # V, H, I, R, T, M
    return HatchAppIds(
        dandelion_voting=b'V' * 32,
        hatch=b'H' * 32,
        impact_hours=b'I' * 32,
        redemptions=b'R' * 32,
        tollgate=b'T' * 32,
        migration_tools=b'M' * 32,
    )
