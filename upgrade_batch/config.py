import os
from pathlib import Path
from typing import Any, Dict, Mapping, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from upgrade_batch.constants import (
    ACCESS_MANAGER_ENVVAR_TEMPLATE,
    DEFAULT_RELEASE,
    EARLIEST_EXECUTION,
    MAX_UINT48,
    SAFE_ADDRESS_ENVVAR_TEMPLATE,
    TX_BUILDER_VERSION,
)
from upgrade_batch.utils import _load_yaml

BATCH_PARAMS_KEY = "batch"


class UnresolvedNetworkError(ValueError):
    """Raised when the chain id or the Safe address of the target network cannot be determined."""


class BatchConfig(NamedTuple):
    """Everything the builder needs to know about the network, the Safe and the batch."""

    chain_id: int
    safe_address: ChecksumAddress
    access_manager_address: Optional[ChecksumAddress] = None
    when: int = EARLIEST_EXECUTION
    name: str = ""
    description: str = ""
    owner_address: str = ""
    tx_builder_version: str = TX_BUILDER_VERSION
    release: str = DEFAULT_RELEASE


# params file keys that map onto BatchConfig fields
PARAMS_FIELDS = (
    "chain_id",
    "safe_address",
    "access_manager_address",
    "when",
    "name",
    "description",
    "owner_address",
    "tx_builder_version",
    "release",
)


def network_envvar_prefix(network_name: str) -> str:
    """Returns the environment variable prefix of a network, e.g. `mainnet-fork` -> MAINNET_FORK."""
    return network_name.upper().replace("-", "_").replace(":", "_")


def safe_address_envvar(network_name: str) -> str:
    return SAFE_ADDRESS_ENVVAR_TEMPLATE.format(network=network_envvar_prefix(network_name))


def access_manager_envvar(network_name: str) -> str:
    return ACCESS_MANAGER_ENVVAR_TEMPLATE.format(network=network_envvar_prefix(network_name))


def load_batch_params(filepath: Path) -> Dict[str, Any]:
    """Reads batch parameters from the `batch` section of a YAML params file."""
    config = _load_yaml(filepath) or dict()
    params = config.get(BATCH_PARAMS_KEY)
    if params is None:
        raise ValueError(f"'{BATCH_PARAMS_KEY}' is not set in params file {filepath}.")
    if not isinstance(params, dict):
        raise ValueError(f"Malformed '{BATCH_PARAMS_KEY}' section in params file {filepath}.")

    unknown = set(params) - set(PARAMS_FIELDS)
    if unknown:
        raise ValueError(f"Unknown batch parameter(s) in {filepath}: {', '.join(sorted(unknown))}")
    return params


def _env_params(network_name: str, environ: Mapping[str, str]) -> Dict[str, Any]:
    params = dict()
    safe_address = environ.get(safe_address_envvar(network_name))
    if safe_address:
        params["safe_address"] = safe_address
    access_manager = environ.get(access_manager_envvar(network_name))
    if access_manager:
        params["access_manager_address"] = access_manager
    return params


def _checksum(value: str, description: str, error=ValueError) -> ChecksumAddress:
    if not isinstance(value, str) or not is_address(value):
        raise error(f"Invalid {description} '{value}'.")
    return to_checksum_address(value)


def load_batch_config(
    network_name: str,
    chain_id: Optional[int],
    params_filepath: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> BatchConfig:
    """
    Resolves the configuration of a batch.

    Sources in increasing precedence: defaults, the params file,
    the `<NETWORK>_SAFE_ADDRESS` and `<NETWORK>_ACCESS_MANAGER_ADDRESS` environment
    variables, then explicit overrides (`None` overrides are ignored).
    """
    environ = os.environ if environ is None else environ

    params: Dict[str, Any] = dict()
    if params_filepath:
        # empty keys of the params file fall back to defaults
        params.update(
            {k: v for k, v in load_batch_params(params_filepath).items() if v is not None}
        )
    params.update(_env_params(network_name, environ))
    params.update({k: v for k, v in overrides.items() if v is not None})

    if chain_id is None:
        raise UnresolvedNetworkError(f"Cannot determine chain id of network '{network_name}'.")
    params_chain_id = params.pop("chain_id", None)
    if params_chain_id is not None and int(params_chain_id) != int(chain_id):
        raise UnresolvedNetworkError(
            f"chain_id in params file ({params_chain_id}) does not match "
            f"chain_id of network '{network_name}' ({chain_id})."
        )

    safe_address = params.pop("safe_address", None)
    if not safe_address:
        raise UnresolvedNetworkError(
            f"{safe_address_envvar(network_name)} is not set for network '{network_name}'."
        )
    safe_address = _checksum(safe_address, "Safe address", error=UnresolvedNetworkError)

    access_manager_address = params.pop("access_manager_address", None)
    if access_manager_address:
        access_manager_address = _checksum(access_manager_address, "access manager address")

    when = int(params.pop("when", EARLIEST_EXECUTION))
    if not 0 <= when <= MAX_UINT48:
        raise ValueError(f"Execution time {when} does not fit in uint48.")

    release = str(params.pop("release", DEFAULT_RELEASE))
    name = params.pop("name", None) or f"Upgrade {release}"

    return BatchConfig(
        chain_id=int(chain_id),
        safe_address=safe_address,
        access_manager_address=access_manager_address,
        when=when,
        name=name,
        release=release,
        **{k: str(v) for k, v in params.items()},
    )
