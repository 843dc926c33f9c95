from pathlib import Path

import click

from upgrade_batch.constants import DEFAULT_OUTPUT_FILENAME, MAX_UINT48
from upgrade_batch.types import BoundedInt, ChecksumAddress

registry_option = click.option(
    "--registry",
    "-r",
    help="Filepath of the address registry. Defaults to deploy-out/upgrade-<release>-<chain id>.json",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)

release_option = click.option(
    "--release",
    help="Release whose address registry is used to build the batch.",
    type=str,
    required=False,
)

output_option = click.option(
    "--output",
    "-o",
    help="Filepath of the transaction builder batch file.",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(DEFAULT_OUTPUT_FILENAME),
    show_default=True,
)

params_option = click.option(
    "--params",
    "-p",
    help="YAML file with batch parameters.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

safe_address_option = click.option(
    "--safe-address",
    "-s",
    help="Safe proposing the batch. Defaults to <NETWORK>_SAFE_ADDRESS.",
    type=ChecksumAddress(),
    required=False,
)

access_manager_option = click.option(
    "--access-manager",
    "-a",
    help="Access manager scheduling the upgrades. Defaults to <NETWORK>_ACCESS_MANAGER_ADDRESS.",
    type=ChecksumAddress(),
    required=False,
)

when_option = click.option(
    "--when",
    "-w",
    help="Execution timestamp of the scheduled upgrades; 0 is the earliest allowed.",
    type=BoundedInt(0, MAX_UINT48),
    required=False,
)

name_option = click.option(
    "--name",
    help="Name of the batch shown in the transaction builder.",
    type=str,
    required=False,
)

description_option = click.option(
    "--description",
    help="Description of the batch shown in the transaction builder.",
    type=str,
    required=False,
)

owner_option = click.option(
    "--owner",
    help="Safe owner creating the batch.",
    type=ChecksumAddress(),
    required=False,
)

batch_option = click.option(
    "--batch",
    "-b",
    help="Filepath of a transaction builder batch file.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)
