#!/usr/bin/python3
# Usage:
#  > ape run create_upgrade_batch --network ethereum:mainnet:infura --release 1.1.0

import click
from ape.cli import ConnectedProviderCommand

from upgrade_batch.batch import UpgradeBatchBuilder
from upgrade_batch.config import load_batch_config
from upgrade_batch.constants import DEPLOY_OUT_DIR, registry_filename
from upgrade_batch.networks import (
    get_chain_id,
    get_network_name,
    is_local_network,
    print_network_info,
)
from upgrade_batch.options import (
    access_manager_option,
    description_option,
    name_option,
    output_option,
    owner_option,
    params_option,
    registry_option,
    release_option,
    safe_address_option,
    when_option,
)
from upgrade_batch.registry import read_registry


@click.command(cls=ConnectedProviderCommand, name="create-upgrade-batch")
@registry_option
@release_option
@output_option
@params_option
@safe_address_option
@access_manager_option
@when_option
@name_option
@description_option
@owner_option
def cli(
    registry,
    release,
    output,
    params,
    safe_address,
    access_manager,
    when,
    name,
    description,
    owner,
):
    """Create a Safe transaction builder batch scheduling the upgrade of deployed proxies."""
    print_network_info()
    if is_local_network():
        click.secho("WARNING: Creating an upgrade batch for a local network.", fg="yellow")

    network_name = get_network_name()
    config = load_batch_config(
        network_name=network_name,
        chain_id=get_chain_id(),
        params_filepath=params,
        safe_address=safe_address,
        access_manager_address=access_manager,
        when=when,
        name=name,
        description=description,
        owner_address=owner,
        release=release,
    )

    registry_filepath = registry or DEPLOY_OUT_DIR / registry_filename(
        release=config.release, chain_id=config.chain_id
    )
    address_registry = read_registry(filepath=registry_filepath)

    builder = UpgradeBatchBuilder(config=config)
    batch = builder.build(registry=address_registry)
    if not batch.transactions:
        click.secho("WARNING: No proxy with a new implementation found in registry.", fg="yellow")

    output_filepath = builder.emit(batch=batch, filepath=output)
    click.secho(
        f"Safe batch '{config.name}' with {len(batch.transactions)} transaction(s) "
        f"for Safe {config.safe_address} saved to {output_filepath}",
        fg="green",
    )


if __name__ == "__main__":
    cli()
