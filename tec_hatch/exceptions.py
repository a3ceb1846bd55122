"""Errors raised while deploying a Hatch DAO."""


class HatchDeploymentError(Exception):
    """Base class for every deployment failure"""


class ParameterError(HatchDeploymentError):
    """A deployment parameter is missing or malformed"""


class TransactionFailedError(HatchDeploymentError):
    """A transaction was mined but reverted"""

    def __init__(self, description, tx_hash):
        super().__init__(f"{description} failed (tx {tx_hash})")
        self.tx_hash = tx_hash


class EventTimeoutError(HatchDeploymentError):
    """The expected event was not emitted before the timeout"""


class MissingAppProxyError(HatchDeploymentError):
    """The DAO log has no NewAppProxy event for one or more apps"""

    def __init__(self, dao_address, missing):
        super().__init__(
            f"No app proxy found in DAO {dao_address} for: {', '.join(missing)}"
        )
        self.dao_address = dao_address
        self.missing = list(missing)


class DeploymentStateError(HatchDeploymentError):
    """A deployment step was called out of order"""


class DuplicateEventError(HatchDeploymentError):
    """A transaction emitted the same creation event more than once"""
