import typing
from collections import OrderedDict
from typing import Any, Dict, List, NamedTuple, Tuple, Union

from eth_abi import decode, encode
from eth_typing import ChecksumAddress
from eth_utils import (
    function_signature_to_4byte_selector,
    to_bytes,
    to_checksum_address,
    to_hex,
)
from web3.auto import w3

from upgrade_batch.constants import EARLIEST_EXECUTION, MAX_UINT48, MethodKind

ContractInputsValues = typing.OrderedDict[str, str]


class UnknownMethodKind(ValueError):
    """Raised for a method kind outside of the supported governance calls."""


class MethodInput(NamedTuple):
    name: str
    type: str
    internal_type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type, "internalType": self.internal_type}


class MethodDescriptor(NamedTuple):
    """ABI level description of a contract method, as presented by the transaction builder."""

    name: str
    inputs: Tuple[MethodInput, ...]
    payable: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(i.type for i in self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    @property
    def input_names(self) -> List[str]:
        return [i.name for i in self.inputs]

    @property
    def input_types(self) -> List[str]:
        return [i.type for i in self.inputs]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputs": [i.to_dict() for i in self.inputs],
            "name": self.name,
            "payable": self.payable,
        }


# AccessManager.schedule(address target, bytes data, uint48 when)
SCHEDULE_METHOD = MethodDescriptor(
    name="schedule",
    inputs=(
        MethodInput(name="target", type="address", internal_type="address"),
        MethodInput(name="data", type="bytes", internal_type="bytes"),
        MethodInput(name="when", type="uint48", internal_type="uint48"),
    ),
)

# upgradeTo(address newImplementation)
UPGRADE_METHOD = MethodDescriptor(
    name="upgradeTo",
    inputs=(MethodInput(name="newImplementation", type="address", internal_type="address"),),
)

METHODS = {
    MethodKind.SCHEDULE: SCHEDULE_METHOD,
    MethodKind.UPGRADE: UPGRADE_METHOD,
}


def get_method_kind(method_kind: Union[MethodKind, str]) -> MethodKind:
    try:
        return MethodKind(method_kind)
    except ValueError:
        raise UnknownMethodKind(f"Invalid method kind: {method_kind}")


def get_method(method_kind: Union[MethodKind, str]) -> MethodDescriptor:
    method_kind = get_method_kind(method_kind)
    try:
        return METHODS[method_kind]
    except KeyError:
        raise UnknownMethodKind(f"No method descriptor for {method_kind}")


def _validate_method_args(method: MethodDescriptor, args: typing.Sequence[Any]) -> None:
    """Validates call arguments against the method ABI."""
    if len(args) != len(method.inputs):
        raise ValueError(
            f"'{method.signature}' expects {len(method.inputs)} arg(s), got {len(args)}"
        )
    for arg, method_input in zip(args, method.inputs):
        if not w3.is_encodable(method_input.type, arg):
            raise ValueError(
                f"Value '{arg}' for '{method_input.name}' does not match "
                f"ABI type '{method_input.type}' of '{method.signature}'"
            )


def encode_call(method: MethodDescriptor, *args) -> bytes:
    """Returns the call data (selector followed by the ABI encoded arguments) for a method call."""
    _validate_method_args(method, args)
    return method.selector + encode(method.input_types, list(args))


def _format_value(abi_type: str, value: Any) -> str:
    """Formats a call argument the way the transaction builder expects it: as a string."""
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return to_hex(value)
    return str(value)


def decode_call(method_kind: Union[MethodKind, str], data: Union[bytes, str]) -> ContractInputsValues:
    """
    Decodes call data produced for a method kind back into transaction
    builder input values.
    """
    method = get_method(method_kind)
    data = to_bytes(hexstr=data) if isinstance(data, str) else bytes(data)
    selector, encoded_args = data[:4], data[4:]
    if selector != method.selector:
        raise ValueError(f"Call data is not a '{method.signature}' call")

    args = decode(method.input_types, encoded_args)
    return OrderedDict(
        (method_input.name, _format_value(method_input.type, arg))
        for method_input, arg in zip(method.inputs, args)
    )


def derive_call(
    method_kind: Union[MethodKind, str],
    proxy_address: ChecksumAddress,
    implementation_address: ChecksumAddress,
    when: int = EARLIEST_EXECUTION,
) -> Tuple[MethodDescriptor, ContractInputsValues]:
    """
    Returns the method descriptor and input values of a governance call for a proxy upgrade.

    `schedule` submits the proxy's `upgrade` call to the access manager for delayed
    execution at `when` (0 being the earliest time the access manager allows),
    `upgrade` points the proxy to its new implementation.
    """
    method_kind = get_method_kind(method_kind)
    method = get_method(method_kind)

    if method_kind == MethodKind.SCHEDULE:
        if not 0 <= when <= MAX_UINT48:
            raise ValueError(f"Execution time {when} does not fit in uint48")
        upgrade_data = encode_derived_call(MethodKind.UPGRADE, proxy_address, implementation_address)
        values = OrderedDict(
            target=proxy_address,
            data=to_hex(upgrade_data),
            when=str(when),
        )
    elif method_kind == MethodKind.UPGRADE:
        values = OrderedDict(newImplementation=implementation_address)
    else:
        raise UnknownMethodKind(f"Invalid method kind: {method_kind}")

    return method, values


def _parse_value(abi_type: str, value: str) -> Any:
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return to_bytes(hexstr=value)
    return int(value)


def encode_derived_call(
    method_kind: Union[MethodKind, str],
    proxy_address: ChecksumAddress,
    implementation_address: ChecksumAddress,
    when: int = EARLIEST_EXECUTION,
) -> bytes:
    """Returns the call data of the governance call derived for a proxy upgrade."""
    method, values = derive_call(method_kind, proxy_address, implementation_address, when)
    args = [_parse_value(i.type, values[i.name]) for i in method.inputs]
    return encode_call(method, *args)
