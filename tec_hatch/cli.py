"""
Command-line entry point for deploying a Hatch DAO.

Usage::

    new-hatch --network xdai --daoid mytec
    new-hatch --network rinkeby --output hatch-addresses.json
"""

import sys
import json
import uuid
import logging
import argparse

from .chain import ChainClient
from .config import Settings, template_address
from .new_hatch import HatchDeployer
from .params import block_time_for, get_params

logger = logging.getLogger(__name__)


def configure_logging(log_file: str = 'new_hatch.log'):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def default_dao_id() -> str:
    """Aragon ids must be unique, so every run gets a fresh one."""
    return f"testtec{uuid.uuid4().hex[:12]}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="new-hatch",
        description="Deploy a TEC Hatch DAO through the HatchTemplate.",
    )
    parser.add_argument(
        "--network",
        default="local",
        help="Target network: local, xdai, rinkeby or mainnet. (default: local)",
    )
    parser.add_argument(
        "--daoid",
        default=None,
        help="Aragon id of the new DAO. Must be unique per deployment. (default: random)",
    )
    parser.add_argument(
        "--event-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the DeployDao event. (default: EVENT_TIMEOUT or 120)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the deployed addresses to this JSON file.",
    )
    return parser


def run(args: argparse.Namespace):
    settings = Settings.from_env(args.network)
    block_time = block_time_for(args.network)

    logger.info(f"Every {block_time}s a new block is mined in {args.network}.")

    params = get_params(block_time)
    client = ChainClient.from_settings(settings)
    template = client.contract_at("HatchTemplate", template_address(settings))

    deployer = HatchDeployer(
        client,
        template,
        params,
        dao_id=args.daoid or default_dao_id(),
        event_timeout=args.event_timeout if args.event_timeout is not None else settings.event_timeout,
        event_poll_interval=settings.event_poll_interval,
    )
    addresses = deployer.deploy()

    logger.info(f"Hatch deployed: {json.dumps(addresses.to_dict(), indent=2)}")
    if args.output:
        with open(args.output, 'w') as f:
            json.dump(addresses.to_dict(), f, indent=2)
    return addresses


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging()

    try:
        run(args)
    except KeyboardInterrupt:
        logger.info("Deployment interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Deployment failed: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
