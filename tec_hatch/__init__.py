"""
TEC Hatch Deployment
====================

Scripts for deploying a Hatch DAO through the HatchTemplate.

Structure:
- new_hatch: three step deployment orchestrator
- events: DeployDao and NewAppProxy address discovery
- params: deployment parameters per network
- chain: web3 connection and transaction helpers
- cli: new-hatch command
"""

from .models import DeploymentParameters, HatchAddresses
from .new_hatch import HatchDeployer

__version__ = "1.0.0"

__all__ = ['DeploymentParameters', 'HatchAddresses', 'HatchDeployer']
