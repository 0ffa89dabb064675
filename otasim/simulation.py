"""End-to-end OTA failure scenarios on the simulated device."""

import argparse
import sys
from dataclasses import replace
from enum import IntEnum

from otasim.bootloader import SLOT_A_ADDR, SLOT_B_ADDR, SLOT_SIZE, Bootloader
from otasim.flash import Flash, PowerLoss
from otasim.metadata import MetadataStore, OtaMetadata, OtaState
from otasim.security import SIGNATURE_MAX_SIZE, sign_image
from otasim.watchdog import Watchdog, WatchdogReset

FACTORY_ADDR = 0xA00


class FirmwareMode(IntEnum):
    GOOD = 0
    BAD = 1
    HANG = 2


def program_slot(flash, addr, mode, version):
    """Write a test image and its signature (zeroed when BAD) at ``addr``."""
    image = bytes((0x10 + offset) & 0xFF for offset in range(SLOT_SIZE))
    if mode == FirmwareMode.BAD:
        signature = bytes(SIGNATURE_MAX_SIZE)
    else:
        signature = sign_image(image, version)

    flash.erase(addr, SLOT_SIZE + SIGNATURE_MAX_SIZE)
    flash.write(addr, image)
    flash.write(addr + SLOT_SIZE, signature)


def run_firmware(watchdog, out=None):
    """Run firmware that hangs; only a running watchdog ends it, by raising."""
    stream = sys.stdout if out is None else out
    print("🧠 FIRMWARE RUNNING", file=stream)
    print("💀 FIRMWARE HUNG", file=stream)
    while True:
        watchdog.tick()


def run_simulation(out=None):
    """Run the bad-image and hanging-image scenarios; return the exit status."""
    stream = sys.stdout if out is None else out

    def say(message):
        print(message, file=stream)

    flash = Flash()
    store = MetadataStore(flash)
    watchdog = Watchdog()
    bootloader = Bootloader(flash, store, watchdog, stream)

    say("\n=== OTA FAILURE SIMULATION START ===")
    try:
        program_slot(flash, FACTORY_ADDR, FirmwareMode.GOOD, 1)
        program_slot(flash, SLOT_A_ADDR, FirmwareMode.GOOD, 5)

        meta = OtaMetadata(
            active_slot=0,
            pending_slot=1,
            active_fw_version=5,
            pending_fw_version=0,
            min_allowed_version=3,
            ota_state=OtaState.IDLE,
            boot_attempts=0,
        )
        store.update(meta)

        say("\n--- TEST: BAD OTA IMAGE ---")
        meta = replace(meta, pending_fw_version=6)
        program_slot(flash, SLOT_B_ADDR, FirmwareMode.BAD, 6)
        meta = replace(meta, ota_state=OtaState.COMMIT_PENDING)
        store.update(meta)
        bootloader.boot()

        say("\n--- TEST: HANGING OTA IMAGE ---")
        meta = replace(meta, pending_fw_version=6)
        program_slot(flash, SLOT_B_ADDR, FirmwareMode.GOOD, 6)
        meta = replace(meta, ota_state=OtaState.COMMIT_PENDING)
        store.update(meta)

        if bootloader.boot():
            # The booted image runs under the watchdog.
            watchdog.start()
            run_firmware(watchdog, stream)
    except WatchdogReset as exc:
        say(f"🐶 {exc}")
    except PowerLoss as exc:
        say(f"💥 {exc}")
    return 0


def main(argv=None):
    """Command entry point."""
    parser = argparse.ArgumentParser(
        prog="otasim",
        description="Simulate OTA updates failing on a device with A/B slots.",
    )
    parser.parse_args(argv)
    return run_simulation()