from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from upgrade_batch.constants import NEW_IMPLEMENTATION_SUFFIX, PROXY_SUFFIX
from upgrade_batch.utils import _load_json

Category = str
ContractName = str

AddressRegistry = Dict[Category, Dict[ContractName, ChecksumAddress]]


class RegistryReadError(ValueError):
    """Raised when an address registry is missing or malformed."""


class UpgradePair(NamedTuple):
    """A proxy and the implementation it is about to be upgraded to."""

    category: Category
    name: ContractName
    proxy: ChecksumAddress
    implementation: ChecksumAddress


def _normalize_address(category: Category, name: ContractName, address) -> ChecksumAddress:
    if not isinstance(address, str) or not is_address(address):
        raise RegistryReadError(
            f"Invalid address '{address}' for {name} in registry category '{category}'."
        )
    return to_checksum_address(address)


def parse_registry(data) -> AddressRegistry:
    """Validates raw registry data and returns it with checksummed addresses."""
    if not isinstance(data, dict):
        raise RegistryReadError("Address registry must be a mapping of categories.")

    registry = OrderedDict()
    for category, contracts in data.items():
        if not isinstance(contracts, dict):
            raise RegistryReadError(
                f"Registry category '{category}' must map contract names to addresses."
            )
        registry[str(category)] = OrderedDict(
            (name, _normalize_address(category, name, address))
            for name, address in contracts.items()
        )
    return registry


def read_registry(filepath: Path) -> AddressRegistry:
    """Reads an address registry produced by the deployment pipeline."""
    if not filepath.exists():
        raise RegistryReadError(f"No address registry found at {filepath}.")
    try:
        data = _load_json(filepath)
    except (OSError, ValueError) as e:
        # invalid JSON or non UTF-8 content
        raise RegistryReadError(f"Cannot read address registry at {filepath}: {e}") from e

    registry = parse_registry(data)
    total = sum(len(contracts) for contracts in registry.values())
    print(f"(i) Loaded {total} address(es) in {len(registry)} category(ies) from {filepath}")
    return registry


def base_name(proxy_name: ContractName) -> ContractName:
    return proxy_name[: -len(PROXY_SUFFIX)]


def implementation_name(proxy_name: ContractName) -> ContractName:
    """Returns the name of the sibling entry holding the new implementation of a proxy."""
    return f"{base_name(proxy_name)}{NEW_IMPLEMENTATION_SUFFIX}"


def iter_upgrade_pairs(registry: AddressRegistry) -> Iterator[UpgradePair]:
    """
    Yields every proxy of the registry that has a new implementation sibling,
    in registry order. Proxies without one are not being upgraded and are skipped.
    """
    for category, contracts in registry.items():
        for contract_name, address in contracts.items():
            if not contract_name.endswith(PROXY_SUFFIX):
                continue

            sibling_name = implementation_name(contract_name)
            implementation = contracts.get(sibling_name)
            if not implementation:
                print(
                    f"(i) Skipping {contract_name} in '{category}': "
                    f"no {sibling_name} entry found."
                )
                continue

            yield UpgradePair(
                category=category,
                name=base_name(contract_name),
                proxy=address,
                implementation=implementation,
            )


def get_upgrade_pairs(registry: AddressRegistry) -> List[UpgradePair]:
    return list(iter_upgrade_pairs(registry))
