#!/usr/bin/python3

import click

from upgrade_batch.batch import BatchChecksumMismatch, read_batch, verify_checksum
from upgrade_batch.options import batch_option


@click.command(name="verify-upgrade-batch")
@batch_option
def cli(batch):
    """Check that a transaction builder batch still matches its checksum."""
    document = read_batch(batch)
    if not verify_checksum(document):
        raise BatchChecksumMismatch(f"Transactions in {batch} do not match the batch checksum")

    transactions = document["transactions"]
    click.secho(f"Batch {batch} ({len(transactions)} transaction(s)) matches its checksum.", fg="green")
    for index, transaction in enumerate(transactions, start=1):
        method = transaction["contractMethod"]["name"]
        click.secho(f"    {index}. {method} via {transaction['to']}", fg="cyan")


if __name__ == "__main__":
    cli()
