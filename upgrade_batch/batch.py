import json
import time
from collections import OrderedDict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from eth_typing import ChecksumAddress
from eth_utils import encode_hex, keccak

from upgrade_batch.config import BatchConfig
from upgrade_batch.constants import (
    BATCH_FORMAT_VERSION,
    BATCH_JSON_FORMAT,
    CANONICAL_JSON_FORMAT,
    EARLIEST_EXECUTION,
    NULL_VALUE,
    MethodKind,
)
from upgrade_batch.methods import MethodDescriptor, derive_call, get_method_kind
from upgrade_batch.registry import AddressRegistry, iter_upgrade_pairs
from upgrade_batch.utils import _load_json, _write_json


class BatchChecksumMismatch(ValueError):
    """Raised when a batch document does not match its own checksum."""


class ProposedTransaction(NamedTuple):
    """A single call of a Safe transaction builder batch."""

    to: ChecksumAddress
    value: str
    data: Optional[str]
    contract_method: MethodDescriptor
    contract_inputs_values: Mapping[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return OrderedDict(
            to=self.to,
            value=self.value,
            data=self.data,
            contractMethod=self.contract_method.to_dict(),
            contractInputsValues=dict(self.contract_inputs_values),
        )


class UpgradeBatch(NamedTuple):
    """Transaction builder document scheduling a set of proxy upgrades."""

    version: str
    chain_id: str
    created_at: int
    meta: Mapping[str, str]
    transactions: Tuple[ProposedTransaction, ...]

    @property
    def checksum(self) -> str:
        return self.meta["checksum"]

    def to_dict(self) -> Dict[str, Any]:
        return OrderedDict(
            version=self.version,
            chainId=self.chain_id,
            createdAt=self.created_at,
            meta=dict(self.meta),
            transactions=_as_dicts(self.transactions),
        )


def build_transaction(
    access_manager_address: Optional[ChecksumAddress],
    method_kind: Union[MethodKind, str],
    proxy_address: ChecksumAddress,
    implementation_address: ChecksumAddress,
    when: int = EARLIEST_EXECUTION,
) -> ProposedTransaction:
    """
    Builds one transaction of the batch for a proxy upgrade.

    Scheduling is sent to the proxy, anything else to the access manager.
    Raw call data is left unset: the transaction builder encodes
    the call from the method descriptor and its input values.
    """
    method_kind = get_method_kind(method_kind)
    contract_method, contract_inputs_values = derive_call(
        method_kind, proxy_address, implementation_address, when=when
    )

    if method_kind == MethodKind.SCHEDULE:
        to = proxy_address
    else:
        if not access_manager_address:
            raise ValueError(f"An access manager address is required for '{method_kind.value}'")
        to = access_manager_address

    return ProposedTransaction(
        to=to,
        value=NULL_VALUE,
        data=None,
        contract_method=contract_method,
        contract_inputs_values=MappingProxyType(contract_inputs_values),
    )


def process_registry(
    registry: AddressRegistry,
    access_manager_address: Optional[ChecksumAddress] = None,
    when: int = EARLIEST_EXECUTION,
) -> List[ProposedTransaction]:
    """Returns one `schedule` transaction per proxy of the registry with a new implementation."""
    transactions = list()
    for pair in iter_upgrade_pairs(registry):
        transaction = build_transaction(
            access_manager_address=access_manager_address,
            method_kind=MethodKind.SCHEDULE,
            proxy_address=pair.proxy,
            implementation_address=pair.implementation,
            when=when,
        )
        transactions.append(transaction)
    return transactions


def _as_dicts(transactions: Sequence[Union[ProposedTransaction, Dict]]) -> List[Dict[str, Any]]:
    return [t.to_dict() if isinstance(t, ProposedTransaction) else t for t in transactions]


def generate_checksum(transactions: Sequence[Union[ProposedTransaction, Dict]]) -> str:
    """Keccak-256 of the compact JSON serialization of the transactions."""
    serialized = json.dumps(_as_dicts(transactions), **CANONICAL_JSON_FORMAT)
    return encode_hex(keccak(text=serialized))


def verify_checksum(document: Any) -> bool:
    """
    Returns True if a batch document still matches the checksum it was emitted with.
    A document without a checksum or a transaction list never matches.
    """
    if not isinstance(document, dict):
        return False
    meta, transactions = document.get("meta"), document.get("transactions")
    if not isinstance(meta, dict) or not isinstance(transactions, list):
        return False
    expected = meta.get("checksum")
    if not expected:
        return False
    return generate_checksum(transactions) == expected


def read_batch(filepath: Path) -> Dict[str, Any]:
    return _load_json(filepath)


def emit(batch: UpgradeBatch, filepath: Path) -> Path:
    """Writes the batch document in one step; nothing is written on failure."""
    return _write_json(batch.to_dict(), filepath, BATCH_JSON_FORMAT)


class UpgradeBatchBuilder:
    """Builds upgrade batches for the network and Safe described by a `BatchConfig`."""

    def __init__(self, config: BatchConfig):
        self.config = config

    def _meta(self, checksum: str) -> Dict[str, str]:
        return OrderedDict(
            name=self.config.name,
            description=self.config.description,
            txBuilderVersion=self.config.tx_builder_version,
            createdFromSafeAddress=self.config.safe_address,
            createdFromOwnerAddress=self.config.owner_address,
            checksum=checksum,
        )

    def build(self, registry: AddressRegistry, created_at: Optional[int] = None) -> UpgradeBatch:
        transactions = process_registry(
            registry,
            access_manager_address=self.config.access_manager_address,
            when=self.config.when,
        )
        finalized = tuple(transactions)
        checksum = generate_checksum(finalized)
        print(f"(i) Prepared {len(finalized)} upgrade transaction(s) with checksum {checksum}")

        if created_at is None:
            created_at = int(time.time() * 1000)

        return UpgradeBatch(
            version=BATCH_FORMAT_VERSION,
            chain_id=str(self.config.chain_id),
            created_at=created_at,
            meta=MappingProxyType(self._meta(checksum)),
            transactions=finalized,
        )

    def emit(self, batch: UpgradeBatch, filepath: Path) -> Path:
        filepath = emit(batch, filepath)
        print(f"(i) Safe transaction batch written to {filepath}")
        return filepath
