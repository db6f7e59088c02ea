import json

import pytest

from conftest import ASSET, DAY, START
from tokenvault.core.exceptions import StorageError
from tokenvault.core.storage import RecordStore, VaultState


def test_record_store_insert_and_update_are_explicit():
    store = RecordStore()
    store.insert("a", 1)
    with pytest.raises(KeyError):
        store.insert("a", 2)
    with pytest.raises(KeyError):
        store.update("b", 2)
    store.update("a", 3)
    assert store.get("a") == 3
    assert store.get("b") is None
    assert "a" in store
    assert len(store) == 1


def test_snapshot_roundtrip(vault, clock, tmp_path):
    vault.deposit("0xalice", ASSET, 1_000, 180 * DAY, 100 * DAY)
    proposal_id = vault.propose("0xalice", "ExtendLock", DAY)
    vault.vote(proposal_id, "0xbob", True)

    path = str(tmp_path / "state" / "vault.json")
    vault.state.save(path)
    restored = VaultState.load(path)

    assert restored.custody.get("0xalice") == vault.get_record("0xalice")
    assert restored.proposals.get(proposal_id) == vault.get_proposal(proposal_id)
    assert restored.last_proposal_id == 1
    assert restored.next_proposal_id() == 2


def test_snapshot_keeps_history(vault, clock, tmp_path):
    vault.deposit("0xalice", ASSET, 100, 180 * DAY)
    clock.set(START + 180 * DAY)
    vault.release_vested("0xalice")
    vault.deposit("0xalice", ASSET, 200, 180 * DAY)

    path = str(tmp_path / "vault.json")
    vault.state.save(path)
    restored = VaultState.load(path)

    assert [r.total_amount for r in restored.history["0xalice"]] == [100]
    assert restored.custody.get("0xalice").total_amount == 200


def test_load_missing_file_raises_storage_error(tmp_path):
    with pytest.raises(StorageError):
        VaultState.load(str(tmp_path / "missing.json"))


def test_load_malformed_snapshot(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        VaultState.load(str(path))

    path.write_text(json.dumps({"version": 1, "custody": [{"depositor": "0xa"}]}), encoding="utf-8")
    with pytest.raises(StorageError):
        VaultState.load(str(path))

    path.write_text(json.dumps({"version": 99}), encoding="utf-8")
    with pytest.raises(StorageError):
        VaultState.load(str(path))
