import io

import pytest

from otasim.bootloader import SLOT_B_ADDR, SLOT_SIZE
from otasim.flash import Flash
from otasim.security import (
    SIGNATURE_MAX_SIZE,
    SignatureInvalidError,
    verify_signature,
)
from otasim.simulation import (
    FACTORY_ADDR,
    FirmwareMode,
    main,
    program_slot,
    run_firmware,
    run_simulation,
)
from otasim.watchdog import Watchdog, WatchdogReset


def _in_order(text, fragments):
    position = 0
    for fragment in fragments:
        found = text.find(fragment, position)
        if found < 0:
            return False
        position = found + len(fragment)
    return True


def test_simulation_walks_through_both_scenarios():
    out = io.StringIO()
    assert run_simulation(out) == 0
    text = out.getvalue()
    assert _in_order(
        text,
        [
            "=== OTA FAILURE SIMULATION START ===",
            "--- TEST: BAD OTA IMAGE ---",
            "VERIFYING PENDING SLOT 1",
            "PENDING SLOT INVALID → ROLLBACK",
            "--- TEST: HANGING OTA IMAGE ---",
            "BOOTING PENDING SLOT 1 (TEST MODE)",
            "FIRMWARE RUNNING",
            "FIRMWARE HUNG",
            "WATCHDOG RESET (firmware unresponsive)",
        ],
    )


def test_good_image_verifies():
    flash = Flash()
    program_slot(flash, SLOT_B_ADDR, FirmwareMode.GOOD, 6)
    image = flash.read(SLOT_B_ADDR, SLOT_SIZE)
    signature = flash.read(SLOT_B_ADDR + SLOT_SIZE, SIGNATURE_MAX_SIZE)
    assert image[:3] == b"\x10\x11\x12"
    assert verify_signature(image, signature, 6, 3) is None


def test_bad_image_has_zero_signature():
    flash = Flash()
    program_slot(flash, FACTORY_ADDR, FirmwareMode.BAD, 1)
    image = flash.read(FACTORY_ADDR, SLOT_SIZE)
    signature = flash.read(FACTORY_ADDR + SLOT_SIZE, SIGNATURE_MAX_SIZE)
    assert signature == bytes(SIGNATURE_MAX_SIZE)
    with pytest.raises(SignatureInvalidError):
        verify_signature(image, signature, 1, 0)


def test_reprogramming_replaces_old_contents():
    flash = Flash()
    program_slot(flash, SLOT_B_ADDR, FirmwareMode.BAD, 6)
    program_slot(flash, SLOT_B_ADDR, FirmwareMode.HANG, 6)
    image = flash.read(SLOT_B_ADDR, SLOT_SIZE)
    signature = flash.read(SLOT_B_ADDR + SLOT_SIZE, SIGNATURE_MAX_SIZE)
    assert verify_signature(image, signature, 6, 6) is None


def test_hanging_firmware_is_reset_by_watchdog():
    watchdog = Watchdog(3)
    watchdog.start()
    out = io.StringIO()
    with pytest.raises(WatchdogReset):
        run_firmware(watchdog, out)
    assert out.getvalue().splitlines() == ["🧠 FIRMWARE RUNNING", "💀 FIRMWARE HUNG"]


def test_main_runs_simulation(capsys):
    assert main([]) == 0
    captured = capsys.readouterr().out
    assert "WATCHDOG RESET" in captured
    assert "OTA FAILURE SIMULATION START" in captured