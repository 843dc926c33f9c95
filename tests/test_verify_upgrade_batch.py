import json

from click.testing import CliRunner

from scripts.verify_upgrade_batch import cli
from upgrade_batch.batch import BatchChecksumMismatch, UpgradeBatchBuilder, emit


def test_verify_upgrade_batch(tmp_path, config, registry):
    batch = UpgradeBatchBuilder(config).build(registry, created_at=1)
    filepath = emit(batch, tmp_path / "batch.json")

    result = CliRunner().invoke(cli, ["--batch", str(filepath)])
    assert result.exit_code == 0, result.output
    assert "matches its checksum" in result.output
    assert "1. schedule via" in result.output


def test_verify_tampered_upgrade_batch(tmp_path, config, registry):
    batch = UpgradeBatchBuilder(config).build(registry, created_at=1)
    filepath = emit(batch, tmp_path / "batch.json")

    document = json.loads(filepath.read_text())
    document["transactions"][1]["to"] = document["transactions"][0]["to"]
    filepath.write_text(json.dumps(document))

    result = CliRunner().invoke(cli, ["--batch", str(filepath)])
    assert result.exit_code != 0
    assert isinstance(result.exception, BatchChecksumMismatch)


def test_verify_missing_batch(tmp_path):
    result = CliRunner().invoke(cli, ["--batch", str(tmp_path / "missing.json")])
    assert result.exit_code == 2
