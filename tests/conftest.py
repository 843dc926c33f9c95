import json
from collections import OrderedDict

import pytest
from eth_utils import to_checksum_address

from upgrade_batch.config import BatchConfig


def address(byte: str) -> str:
    return to_checksum_address("0x" + byte * 20)


FOO_PROXY = address("aa")
FOO_IMPL = address("bb")
BAR_PROXY = address("cc")
BAZ_PROXY = address("dd")
BAZ_IMPL = address("ee")
SAFE = address("5a")
ACCESS_MANAGER = address("ac")
OWNER = address("0e")


@pytest.fixture
def registry():
    return OrderedDict(
        net=OrderedDict(
            [
                ("Foo-Proxy", FOO_PROXY),
                ("Foo-NewImpl", FOO_IMPL),
                ("Bar-Proxy", BAR_PROXY),
            ]
        ),
        other=OrderedDict(
            [
                ("Baz-NewImpl", BAZ_IMPL),
                ("Baz-Proxy", BAZ_PROXY),
                ("Token", address("11")),
            ]
        ),
    )


@pytest.fixture
def registry_filepath(tmp_path, registry):
    filepath = tmp_path / "upgrade-1.1.0-1.json"
    with open(filepath, "w") as file:
        json.dump(registry, file)
    return filepath


@pytest.fixture
def config():
    return BatchConfig(
        chain_id=1,
        safe_address=SAFE,
        access_manager_address=ACCESS_MANAGER,
        name="Upgrade 1.1.0",
        owner_address=OWNER,
    )
