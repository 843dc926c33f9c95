import click
from eth_utils import is_address, to_checksum_address

from upgrade_batch.constants import ZERO_ADDRESS


class BoundedInt(click.ParamType):
    name = "boundedint"

    def __init__(self, min_value, max_value):
        self.min_value = min_value
        self.max_value = max_value

    def convert(self, value, param, ctx):
        try:
            ivalue = int(value)
        except ValueError:
            self.fail(f"{value} is not a valid integer", param, ctx)
        if ivalue < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        if ivalue > self.max_value:
            self.fail(
                f"{value} is greater than the maximum allowed value of {self.max_value}",
                param,
                ctx,
            )
        return ivalue


class ChecksumAddress(click.ParamType):
    """An EIP-55 address that can hold a role in a batch, i.e. not the zero address."""

    name = "checksum_address"

    def convert(self, value, param, ctx):
        if not is_address(value):
            self.fail(f"'{value}' is not a valid ethereum address", param, ctx)
        address = to_checksum_address(value)
        if address == ZERO_ADDRESS:
            self.fail("Zero address is not allowed", param, ctx)
        return address
