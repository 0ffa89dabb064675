import pytest

from otasim.flash import Flash, PowerLoss
from otasim.metadata import (
    BLOCK_SIZE,
    META_A_ADDR,
    META_B_ADDR,
    META_MAGIC,
    META_SIZE,
    MetadataStore,
    OtaMetadata,
    OtaState,
    checksum,
)


def _sample():
    return OtaMetadata(
        active_slot=0,
        pending_slot=1,
        active_fw_version=5,
        pending_fw_version=6,
        min_allowed_version=3,
        ota_state=OtaState.COMMIT_PENDING,
        boot_attempts=0,
    )


def test_checksum_of_empty_is_initial_value():
    assert checksum(b"") == 0xFFFFFFFF


def test_checksum_detects_change():
    assert checksum(b"\x00\x01") != checksum(b"\x01\x00")


def test_pack_unpack_round_trip():
    meta = _sample()
    raw = meta.pack()
    assert len(raw) == BLOCK_SIZE - 4
    assert OtaMetadata.unpack(raw) == meta


def test_pack_is_little_endian_words():
    raw = OtaMetadata(magic=META_MAGIC).pack()
    assert raw[:4] == b"1ATO"


def test_unpack_rejects_wrong_length():
    with pytest.raises(ValueError):
        OtaMetadata.unpack(b"\x00" * 5)


def test_erased_flash_has_no_metadata():
    assert MetadataStore(Flash()).load() is None


def test_update_then_load():
    store = MetadataStore(Flash())
    written = store.update(_sample())
    loaded = store.load()
    assert loaded == written
    assert loaded.seq == 1
    assert loaded.magic == META_MAGIC
    assert loaded.pending_fw_version == 6


def test_sequence_increases_with_each_update():
    store = MetadataStore(Flash())
    seqs = []
    for version in range(1, 6):
        store.update(OtaMetadata(active_fw_version=version))
        loaded = store.load()
        assert loaded.active_fw_version == version
        seqs.append(loaded.seq)
    assert seqs == sorted(seqs)
    assert len(set(seqs)) == len(seqs)


def test_corrupt_blocks_are_ignored():
    flash = Flash()
    store = MetadataStore(flash)
    store.update(_sample())
    flash.write(META_A_ADDR + BLOCK_SIZE - 1, b"\x00")
    assert store.load() is None


def test_both_blocks_erased_means_no_metadata():
    flash = Flash()
    store = MetadataStore(flash)
    for _ in range(3):
        store.update(_sample())
    flash.erase(META_A_ADDR, META_SIZE)
    flash.erase(META_B_ADDR, META_SIZE)
    assert store.load() is None


def test_power_loss_during_update_keeps_previous_record():
    flash = Flash()
    store = MetadataStore(flash)
    for version in range(1, 4):
        store.update(OtaMetadata(active_fw_version=version))
    before = store.load()

    flash.set_power_cut(META_A_ADDR + 4)
    with pytest.raises(PowerLoss):
        store.update(OtaMetadata(active_fw_version=99))

    assert store.load() == before