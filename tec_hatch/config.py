import os
import json
from dataclasses import dataclass
from typing import Optional, Mapping

from dotenv import load_dotenv

from .exceptions import HatchDeploymentError, ParameterError

# Load environment variables from .env file
load_dotenv()

POA_NETWORKS = ('local', 'xdai', 'rinkeby')


def _seconds(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ParameterError(f"{name} must be a number of seconds, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    """Connection and runtime settings read from the environment"""
    network: str
    rpc_url: str
    private_key: Optional[str]
    deployments_dir: str
    template_address: Optional[str]
    event_timeout: float
    event_poll_interval: float
    confirmation_timeout: float

    @property
    def uses_poa(self) -> bool:
        return self.network in POA_NETWORKS

    @classmethod
    def from_env(cls, network: str, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            network=network,
            rpc_url=env.get("RPC_URL", "http://localhost:8545"),
            private_key=env.get("PRIVATE_KEY"),
            deployments_dir=env.get("DEPLOYMENTS_DIR", "deployments"),
            template_address=env.get("HATCH_TEMPLATE_ADDRESS"),
            event_timeout=_seconds(env, "EVENT_TIMEOUT", "120"),
            event_poll_interval=_seconds(env, "EVENT_POLL_INTERVAL", "2"),
            confirmation_timeout=_seconds(env, "CONFIRMATION_TIMEOUT", "300"),
        )


def load_deployment_address(deployments_dir: str, network: str, name: str) -> str:
    """Reads a contract address from a hardhat-deploy record."""
    deployment_path = os.path.join(deployments_dir, network, f'{name}.json')
    try:
        with open(deployment_path, 'r') as f:
            deployment = json.load(f)
        return deployment['address']
    except (FileNotFoundError, KeyError) as e:
        raise HatchDeploymentError(
            f"Could not read {name} deployment from {deployment_path}. Deploy the template first. Details: {e}"
        ) from e


def template_address(settings: Settings) -> str:
    if settings.template_address:
        return settings.template_address
    return load_deployment_address(settings.deployments_dir, settings.network, "HatchTemplate")
