"""
Event based address discovery for the Hatch deployment.

The template announces the new DAO with a DeployDao event and the DAO
kernel announces every app proxy with NewAppProxy. Both are read back here.
"""

import time
import logging
from types import MappingProxyType
from typing import Dict, Iterable, Optional

from web3 import Web3

from .exceptions import DuplicateEventError, EventTimeoutError, MissingAppProxyError
from .models import AppAddress, AppAddressMap, HatchAddresses, HatchAppIds

logger = logging.getLogger(__name__)

APP_ID_GETTERS = {
    'dandelion_voting': 'DANDELION_VOTING_APP_ID',
    'hatch': 'HATCH_APP_ID',
    'impact_hours': 'IMPACT_HOURS_APP_ID',
    'redemptions': 'REDEMPTIONS_APP_ID',
    'tollgate': 'TOLLGATE_APP_ID',
    'migration_tools': 'MIGRATION_TOOLS_APP_ID',
}


def _event_address(args, arg_name: Optional[str]) -> str:
    if arg_name is not None:
        return args[arg_name]
    return next(iter(args.values()))


def resolve_address(
    contract,
    event_name: str,
    tx_hash: bytes,
    from_block: Optional[int] = None,
    arg_name: Optional[str] = None,
    timeout: float = 120,
    poll_interval: float = 2,
) -> str:
    """
    Wait for `event_name` emitted by `tx_hash` and return the address it carries.

    The filter is uninstalled before returning, whether an address was
    found or not.

    Args:
        contract: web3 contract emitting the event
        event_name: Event to listen for, e.g. "DeployDao"
        tx_hash: Hash of an already mined transaction
        from_block: First block the filter covers, defaults to the block
            the transaction was mined in
        arg_name: Event field holding the address, defaults to the first field
        timeout: Seconds to wait before giving up
        poll_interval: Seconds between filter polls

    Raises:
        EventTimeoutError: no matching event arrived in time
        DuplicateEventError: the transaction emitted the event more than once
    """
    wanted = bytes(tx_hash)
    tx_hex = Web3.to_hex(wanted)
    if from_block is None:
        from_block = contract.w3.eth.get_transaction_receipt(tx_hash)['blockNumber']

    event_filter = getattr(contract.events, event_name).create_filter(from_block=from_block)
    try:
        deadline = time.monotonic() + timeout
        entries = event_filter.get_all_entries()
        while True:
            matches = [entry for entry in entries if bytes(entry['transactionHash']) == wanted]
            if len(matches) > 1:
                raise DuplicateEventError(
                    f"Transaction {tx_hex} emitted {len(matches)} {event_name} events, expected one"
                )
            if matches:
                address = _event_address(matches[0]['args'], arg_name)
                logger.debug(f"{event_name} from {tx_hex} carries {address}")
                return address

            if time.monotonic() >= deadline:
                raise EventTimeoutError(
                    f"No {event_name} event for transaction {tx_hex} after {timeout}s"
                )
            time.sleep(poll_interval)
            entries = event_filter.get_new_entries()
    finally:
        contract.w3.eth.uninstall_filter(event_filter.filter_id)


def fetch_app_ids(template) -> HatchAppIds:
    """Reads the six app ids the template installs."""
    return HatchAppIds(**{
        name: bytes(getattr(template.functions, getter)().call())
        for name, getter in APP_ID_GETTERS.items()
    })


def collect_app_proxies(kernel, app_ids: Iterable[bytes], from_block=0) -> AppAddressMap:
    """
    Group the kernel's NewAppProxy events by app id.

    The first proxy of an app id is kept as a plain address; any further
    proxy for the same id turns the entry into a tuple in log order.
    Events for unknown app ids are ignored.
    """
    known = {bytes(app_id) for app_id in app_ids}
    events = kernel.events.NewAppProxy.get_logs(from_block=from_block, to_block='latest')

    apps: Dict[bytes, AppAddress] = {}
    for event in events:
        app_id = bytes(event['args']['appId'])
        if app_id not in known:
            continue

        proxy = event['args']['proxy']
        current = apps.get(app_id)
        if current is None:
            apps[app_id] = proxy
        elif isinstance(current, tuple):
            apps[app_id] = current + (proxy,)
        else:
            apps[app_id] = (current, proxy)

    logger.info(f"Found {len(apps)} of {len(known)} apps in {len(events)} NewAppProxy events")
    return MappingProxyType(apps)


def build_hatch_addresses(dao_address: str, app_ids: HatchAppIds, apps: AppAddressMap) -> HatchAddresses:
    """
    Project the grouped proxies onto the HatchAddresses fields.

    Raises:
        MissingAppProxyError: an app id has no proxy in the DAO log
    """
    missing = [name for name, app_id in app_ids.items() if app_id not in apps]
    if missing:
        raise MissingAppProxyError(dao_address, missing)

    return HatchAddresses(
        dao_address=dao_address,
        dandelion_voting_address=apps[app_ids.dandelion_voting],
        hatch_address=apps[app_ids.hatch],
        impact_hours_address=apps[app_ids.impact_hours],
        redemptions_address=apps[app_ids.redemptions],
        tollgate_address=apps[app_ids.tollgate],
        migration_tools_address=apps[app_ids.migration_tools],
    )
