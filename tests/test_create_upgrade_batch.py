import json
from unittest import mock

import pytest
from conftest import ACCESS_MANAGER, FOO_IMPL, FOO_PROXY, OWNER, SAFE

from scripts import create_upgrade_batch
from upgrade_batch.batch import verify_checksum
from upgrade_batch.config import UnresolvedNetworkError
from upgrade_batch.registry import RegistryReadError

CHAIN_ID = 1513


@pytest.fixture
def connected(tmp_path, monkeypatch):
    """Stands in for the provider `ape run --network iliad` connects to."""
    deploy_out = tmp_path / "deploy-out"
    monkeypatch.delenv("ILIAD_SAFE_ADDRESS", raising=False)
    monkeypatch.delenv("ILIAD_ACCESS_MANAGER_ADDRESS", raising=False)
    with mock.patch.multiple(
        create_upgrade_batch,
        get_chain_id=mock.Mock(return_value=CHAIN_ID),
        get_network_name=mock.Mock(return_value="iliad"),
        is_local_network=mock.Mock(return_value=False),
        print_network_info=mock.Mock(),
        DEPLOY_OUT_DIR=deploy_out,
    ):
        yield deploy_out


def write_registry(filepath, contracts):
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(json.dumps({"iliad": contracts}))
    return filepath


def create(output, **options):
    arguments = dict(
        registry=None,
        release=None,
        output=output,
        params=None,
        safe_address=None,
        access_manager=None,
        when=None,
        name=None,
        description=None,
        owner=None,
    )
    arguments.update(options)
    create_upgrade_batch.cli.callback(**arguments)


def test_create_upgrade_batch(connected, tmp_path, monkeypatch):
    monkeypatch.setenv("ILIAD_SAFE_ADDRESS", SAFE)
    write_registry(
        connected / "upgrade-1.1.0-1513.json", {"Foo-Proxy": FOO_PROXY, "Foo-NewImpl": FOO_IMPL}
    )
    output = tmp_path / "gnosis_safe_schedule.json"

    create(output)

    document = json.loads(output.read_text())
    assert verify_checksum(document)
    assert document["chainId"] == "1513"
    assert document["meta"]["createdFromSafeAddress"] == SAFE
    assert document["meta"]["name"] == "Upgrade 1.1.0"
    (transaction,) = document["transactions"]
    assert transaction["to"] == FOO_PROXY
    assert transaction["contractMethod"]["name"] == "schedule"


def test_create_upgrade_batch_options(connected, tmp_path, monkeypatch):
    monkeypatch.setenv("ILIAD_SAFE_ADDRESS", OWNER)
    write_registry(
        connected / "upgrade-2.0.0-1513.json", {"Foo-Proxy": FOO_PROXY, "Foo-NewImpl": FOO_IMPL}
    )
    output = tmp_path / "batch.json"

    create(
        output,
        release="2.0.0",
        safe_address=SAFE,
        access_manager=ACCESS_MANAGER,
        when=1_700_000_000,
        name="Iliad upgrade",
        description="Scheduled through the AccessManager",
        owner=OWNER,
    )

    document = json.loads(output.read_text())
    assert document["meta"]["name"] == "Iliad upgrade"
    assert document["meta"]["description"] == "Scheduled through the AccessManager"
    assert document["meta"]["createdFromSafeAddress"] == SAFE
    assert document["meta"]["createdFromOwnerAddress"] == OWNER
    assert document["transactions"][0]["contractInputsValues"]["when"] == "1700000000"


def test_create_upgrade_batch_from_registry_option(connected, tmp_path, monkeypatch):
    monkeypatch.setenv("ILIAD_SAFE_ADDRESS", SAFE)
    registry = write_registry(tmp_path / "custom.json", {"Bar-Proxy": FOO_PROXY})
    output = tmp_path / "batch.json"

    create(output, registry=registry)

    document = json.loads(output.read_text())
    assert document["transactions"] == []
    assert verify_checksum(document)


def test_unset_safe_address_writes_nothing(connected, tmp_path):
    write_registry(
        connected / "upgrade-1.1.0-1513.json", {"Foo-Proxy": FOO_PROXY, "Foo-NewImpl": FOO_IMPL}
    )
    output = tmp_path / "batch.json"

    with pytest.raises(UnresolvedNetworkError, match="ILIAD_SAFE_ADDRESS"):
        create(output)
    assert not output.exists()


def test_missing_registry_writes_nothing(connected, tmp_path, monkeypatch):
    monkeypatch.setenv("ILIAD_SAFE_ADDRESS", SAFE)
    output = tmp_path / "batch.json"

    with pytest.raises(RegistryReadError, match="upgrade-1.1.0-1513.json"):
        create(output)
    assert not output.exists()
