from ape import networks

from upgrade_batch.constants import FORK_NETWORK_SUFFIX, LOCAL_NETWORKS


def is_local_network() -> bool:
    network_name = networks.provider.network.name
    return network_name in LOCAL_NETWORKS or network_name.endswith(FORK_NETWORK_SUFFIX)


def get_network_name() -> str:
    """Returns the name of the connected network, e.g. `mainnet` or `sepolia`."""
    return networks.provider.network.name


def get_chain_id() -> int:
    """Queries the connected provider for its chain id."""
    return networks.provider.chain_id


def print_network_info() -> None:
    print(
        f"Ecosystem: {networks.provider.network.ecosystem.name}",
        f"Network: {networks.provider.network.name}",
        f"Chain ID: {networks.provider.chain_id}",
        sep="\n",
    )
