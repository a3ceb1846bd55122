import os
import json
import logging
from typing import Any, Dict, List

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .config import Settings
from .exceptions import HatchDeploymentError, TransactionFailedError

logger = logging.getLogger(__name__)

ABI_DIR = os.path.join(os.path.dirname(__file__), 'abi')


def get_contract_abi(name: str) -> List[Dict[str, Any]]:
    """Loads a bundled contract ABI."""
    with open(os.path.join(ABI_DIR, f'{name}.json'), 'r') as f:
        return json.load(f)


class ChainClient:
    """Sends transactions from a single account and waits for them to be mined"""

    def __init__(self, w3: Web3, account: Any, confirmation_timeout: float = 300):
        self.w3 = w3
        self.account = account
        self.confirmation_timeout = confirmation_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChainClient":
        if not settings.private_key:
            raise HatchDeploymentError("PRIVATE_KEY not found in environment")

        w3 = Web3(Web3.HTTPProvider(settings.rpc_url))
        if settings.uses_poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        if not w3.is_connected():
            raise HatchDeploymentError(f"Could not connect to RPC URL: {settings.rpc_url}")
        logger.info(f"Connected to {settings.network} at {settings.rpc_url}")

        account = w3.eth.account.from_key(settings.private_key)
        logger.info(f"Using app manager account: {account.address}")
        return cls(w3, account, confirmation_timeout=settings.confirmation_timeout)

    @property
    def address(self) -> str:
        return self.account.address

    def contract_at(self, name: str, address: str):
        return self.w3.eth.contract(
            address=self.w3.to_checksum_address(address),
            abi=get_contract_abi(name),
        )

    def call(self, fn) -> Any:
        return fn.call()

    def send(self, fn, description: str = "Transaction"):
        """Sign and broadcast a contract function call, returning its hash."""
        tx = fn.build_transaction({
            'from': self.account.address,
            'nonce': self.w3.eth.get_transaction_count(self.account.address, 'pending'),
        })
        signed_tx = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        logger.info(f"{description} sent: {Web3.to_hex(tx_hash)}")
        return tx_hash

    def wait(self, tx_hash, description: str = "Transaction"):
        """
        Wait for a sent transaction to be mined.

        Returns:
            The transaction receipt

        Raises:
            TransactionFailedError: the transaction was mined with status 0
            web3.exceptions.TimeExhausted: not mined within confirmation_timeout
        """
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.confirmation_timeout)
        if receipt['status'] != 1:
            raise TransactionFailedError(description, Web3.to_hex(tx_hash))

        logger.info(f"{description} confirmed in block {receipt['blockNumber']}")
        return receipt

    def transact(self, fn, description: str = "Transaction"):
        return self.wait(self.send(fn, description), description)
