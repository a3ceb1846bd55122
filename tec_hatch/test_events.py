#!/usr/bin/env python3
"""
Tests for DeployDao address resolution and NewAppProxy aggregation
"""

import pytest
from unittest.mock import MagicMock

from tec_hatch.events import (
    build_hatch_addresses,
    collect_app_proxies,
    fetch_app_ids,
    resolve_address,
)
from tec_hatch.exceptions import DuplicateEventError, EventTimeoutError, MissingAppProxyError

TX_HASH = b'\x01' * 32
OTHER_TX_HASH = b'\x02' * 32


def deploy_dao_entry(tx_hash, dao):
    return {'event': 'DeployDao', 'transactionHash': tx_hash, 'args': {'dao': dao}}


def new_app_proxy(app_id, proxy):
    return {
        'event': 'NewAppProxy',
        'transactionHash': TX_HASH,
        'args': {'proxy': proxy, 'isUpgradeable': True, 'appId': app_id},
    }


class TestResolveAddress:
    """Test class for resolve_address"""

    def setup_method(self):
        self.contract = MagicMock()
        self.event_filter = MagicMock()
        self.event_filter.filter_id = "0xf1"
        self.contract.events.DeployDao.create_filter.return_value = self.event_filter
        self.contract.w3.eth.get_transaction_receipt.return_value = {"blockNumber": 7}

    def test_returns_address_of_matching_transaction(self):
        """Only the entry emitted by the given transaction is used"""
        self.event_filter.get_all_entries.return_value = [
            deploy_dao_entry(OTHER_TX_HASH, "0xOther"),
            deploy_dao_entry(TX_HASH, "0xDao"),
        ]

        address = resolve_address(self.contract, "DeployDao", TX_HASH, from_block=7, timeout=1)

        assert address == "0xDao"
        self.contract.events.DeployDao.create_filter.assert_called_once_with(from_block=7)

    def test_waits_for_late_event(self):
        """Entries that are not indexed yet are picked up on a later poll"""
        self.event_filter.get_all_entries.return_value = []
        self.event_filter.get_new_entries.side_effect = [
            [deploy_dao_entry(OTHER_TX_HASH, "0xOther")],
            [deploy_dao_entry(TX_HASH, "0xDao")],
        ]

        address = resolve_address(self.contract, "DeployDao", TX_HASH, timeout=10, poll_interval=0)

        assert address == "0xDao"
        assert self.event_filter.get_new_entries.call_count == 2
        self.contract.events.DeployDao.create_filter.assert_called_once_with(from_block=7)

    def test_default_start_block_is_the_transaction_block(self):
        """Without from_block the filter still covers a transaction mined several blocks ago"""
        mined_in = 7
        self.contract.w3.eth.get_transaction_receipt.return_value = {"blockNumber": mined_in}

        def create_filter(from_block):
            in_range = isinstance(from_block, int) and from_block <= mined_in
            self.event_filter.get_all_entries.return_value = (
                [deploy_dao_entry(TX_HASH, "0xDao")] if in_range else []
            )
            return self.event_filter

        self.contract.events.DeployDao.create_filter.side_effect = create_filter

        address = resolve_address(self.contract, "DeployDao", TX_HASH, timeout=0, poll_interval=0)

        assert address == "0xDao"
        self.contract.w3.eth.get_transaction_receipt.assert_called_once_with(TX_HASH)
        self.contract.events.DeployDao.create_filter.assert_called_once_with(from_block=mined_in)

    def test_duplicate_event_for_one_transaction(self):
        """A transaction emitting two DeployDao events is rejected"""
        self.event_filter.get_all_entries.return_value = [
            deploy_dao_entry(TX_HASH, "0xDao"),
            deploy_dao_entry(OTHER_TX_HASH, "0xOther"),
            deploy_dao_entry(TX_HASH, "0xSecondDao"),
        ]

        with pytest.raises(DuplicateEventError, match="2 DeployDao events"):
            resolve_address(self.contract, "DeployDao", TX_HASH, from_block=7, timeout=1)

        self.contract.w3.eth.uninstall_filter.assert_called_once_with("0xf1")

    def test_named_argument(self):
        """arg_name selects a field other than the first one"""
        entry = {'transactionHash': TX_HASH, 'args': {'dao': "0xDao", 'token': "0xToken"}}
        self.event_filter.get_all_entries.return_value = [entry]

        address = resolve_address(self.contract, "DeployDao", TX_HASH, arg_name='token', timeout=1)

        assert address == "0xToken"

    def test_filter_uninstalled_after_match(self):
        """The filter never outlives the call"""
        self.event_filter.get_all_entries.return_value = [deploy_dao_entry(TX_HASH, "0xDao")]

        resolve_address(self.contract, "DeployDao", TX_HASH, timeout=1)

        self.contract.w3.eth.uninstall_filter.assert_called_once_with("0xf1")

    def test_timeout(self):
        """A missing event raises instead of waiting forever"""
        self.event_filter.get_all_entries.return_value = [deploy_dao_entry(OTHER_TX_HASH, "0xOther")]

        with pytest.raises(EventTimeoutError, match="0x" + TX_HASH.hex()):
            resolve_address(self.contract, "DeployDao", TX_HASH, timeout=0, poll_interval=0)

        self.contract.w3.eth.uninstall_filter.assert_called_once_with("0xf1")

    def test_repeated_calls_do_not_leak_filters(self):
        """Every created filter is uninstalled"""
        self.event_filter.get_all_entries.return_value = [deploy_dao_entry(TX_HASH, "0xDao")]

        for _ in range(3):
            resolve_address(self.contract, "DeployDao", TX_HASH, timeout=1)

        assert self.contract.events.DeployDao.create_filter.call_count == 3
        assert self.contract.w3.eth.uninstall_filter.call_count == 3


class TestCollectAppProxies:
    """Test class for NewAppProxy grouping"""

    def setup_method(self):
        self.kernel = MagicMock()

    def test_single_proxy_is_plain_address(self, app_ids):
        """One proxy for an app id is not wrapped in a collection"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(app_ids.tollgate, "0xTollgate"),
        ]

        apps = collect_app_proxies(self.kernel, app_ids.values())

        assert apps[app_ids.tollgate] == "0xTollgate"

    def test_repeated_app_id_keeps_log_order(self, app_ids):
        """Several proxies for one app id become a tuple in emission order"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(app_ids.hatch, "0xFirst"),
            new_app_proxy(app_ids.hatch, "0xSecond"),
            new_app_proxy(app_ids.hatch, "0xThird"),
        ]

        apps = collect_app_proxies(self.kernel, app_ids.values())

        assert apps[app_ids.hatch] == ("0xFirst", "0xSecond", "0xThird")

    def test_unknown_app_ids_ignored(self, app_ids):
        """Token Manager and other apps outside the known set are skipped"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(b'X' * 32, "0xTokenManager"),
            new_app_proxy(app_ids.redemptions, "0xRedemptions"),
        ]

        apps = collect_app_proxies(self.kernel, app_ids.values())

        assert dict(apps) == {app_ids.redemptions: "0xRedemptions"}

    def test_single_query_over_whole_history(self, app_ids):
        """The log is read once, from the start block up to latest"""
        self.kernel.events.NewAppProxy.get_logs.return_value = []

        collect_app_proxies(self.kernel, app_ids.values())

        self.kernel.events.NewAppProxy.get_logs.assert_called_once_with(from_block=0, to_block='latest')

    def test_result_is_read_only(self, app_ids):
        """The address map cannot be changed after aggregation"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(app_ids.tollgate, "0xTollgate"),
        ]

        apps = collect_app_proxies(self.kernel, app_ids.values())

        with pytest.raises(TypeError):
            apps[app_ids.tollgate] = "0xOther"


class TestBuildHatchAddresses:
    """Test class for projecting app proxies onto HatchAddresses"""

    def setup_method(self):
        self.kernel = MagicMock()

    def test_hatch_scenario(self, app_ids):
        """V, H, I, R, T, M with H emitted twice"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(app_ids.dandelion_voting, "0xaddr1"),
            new_app_proxy(app_ids.hatch, "0xaddr2"),
            new_app_proxy(app_ids.impact_hours, "0xaddr4"),
            new_app_proxy(app_ids.hatch, "0xaddr3"),
            new_app_proxy(app_ids.redemptions, "0xaddr5"),
            new_app_proxy(app_ids.tollgate, "0xaddr6"),
            new_app_proxy(app_ids.migration_tools, "0xaddr7"),
        ]

        apps = collect_app_proxies(self.kernel, app_ids.values())
        addresses = build_hatch_addresses("0xDao", app_ids, apps)

        assert addresses.dao_address == "0xDao"
        assert addresses.dandelion_voting_address == "0xaddr1"
        assert addresses.hatch_address == ("0xaddr2", "0xaddr3")
        assert addresses.impact_hours_address == "0xaddr4"
        assert addresses.redemptions_address == "0xaddr5"
        assert addresses.tollgate_address == "0xaddr6"
        assert addresses.migration_tools_address == "0xaddr7"

    def test_aggregation_is_idempotent(self, app_ids):
        """Reading the same log twice gives identical results"""
        self.kernel.events.NewAppProxy.get_logs.return_value = [
            new_app_proxy(app_id, f"0x{name}") for name, app_id in app_ids.items()
        ]

        first = build_hatch_addresses("0xDao", app_ids, collect_app_proxies(self.kernel, app_ids.values()))
        second = build_hatch_addresses("0xDao", app_ids, collect_app_proxies(self.kernel, app_ids.values()))

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_missing_app_raises(self, app_ids):
        """An app without proxy is a deployment inconsistency"""
        apps = {
            app_id: f"0x{name}" for name, app_id in app_ids.items()
            if name not in ('tollgate', 'migration_tools')
        }

        with pytest.raises(MissingAppProxyError) as excinfo:
            build_hatch_addresses("0xDao", app_ids, apps)

        assert excinfo.value.missing == ['tollgate', 'migration_tools']
        assert excinfo.value.dao_address == "0xDao"


def test_fetch_app_ids(app_ids):
    """App ids are read from the six template accessors"""
    template = MagicMock()
    getters = {
        'DANDELION_VOTING_APP_ID': app_ids.dandelion_voting,
        'HATCH_APP_ID': app_ids.hatch,
        'IMPACT_HOURS_APP_ID': app_ids.impact_hours,
        'REDEMPTIONS_APP_ID': app_ids.redemptions,
        'TOLLGATE_APP_ID': app_ids.tollgate,
        'MIGRATION_TOOLS_APP_ID': app_ids.migration_tools,
    }
    for getter, value in getters.items():
        getattr(template.functions, getter).return_value.call.return_value = value

    assert fetch_app_ids(template) == app_ids


if __name__ == "__main__":
    pytest.main([__file__])
