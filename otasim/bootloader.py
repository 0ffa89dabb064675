"""A bootloader that picks and verifies a firmware slot from OTA metadata."""

import sys
from dataclasses import replace

from otasim.metadata import OtaState
from otasim.security import SIGNATURE_MAX_SIZE, SecurityError, verify_signature

SLOT_A_ADDR = 0x200
SLOT_B_ADDR = 0x600
SLOT_SIZE = 256
MAX_ATTEMPTS = 3


def slot_address(slot):
    """Return the flash address of a firmware slot (0 is A, anything else B)."""
    return SLOT_B_ADDR if slot else SLOT_A_ADDR


class Bootloader:
    """Chooses between the active and pending slot under watchdog supervision."""

    def __init__(self, flash, store, watchdog, out=None):
        self.flash = flash
        self.store = store
        self.watchdog = watchdog
        self.out = out

    def _say(self, message):
        print(message, file=sys.stdout if self.out is None else self.out)

    def verify_firmware(self, slot, fw_version, min_allowed_version):
        """Return whether the image in ``slot`` is signed for ``fw_version``."""
        base = slot_address(slot)
        image = self.flash.read(base, SLOT_SIZE)
        signature = self.flash.read(base + SLOT_SIZE, SIGNATURE_MAX_SIZE)
        try:
            verify_signature(image, signature, fw_version, min_allowed_version)
        except SecurityError:
            return False
        return True

    def boot(self):
        """Run one boot decision; return True if a slot was booted."""
        self.watchdog.start()
        try:
            return self._select()
        finally:
            self.watchdog.stop()

    def _select(self):
        meta = self.store.load()
        if meta is None:
            self._say("⚠️ METADATA INVALID → BOOT FACTORY")
            return False

        if meta.ota_state in (OtaState.COMMIT_PENDING, OtaState.BOOT_TEST):
            self._say(f"🔎 VERIFYING PENDING SLOT {meta.pending_slot}")

            if meta.boot_attempts >= MAX_ATTEMPTS or not self.verify_firmware(
                meta.pending_slot, meta.pending_fw_version, meta.min_allowed_version
            ):
                self._say("❌ PENDING SLOT INVALID → ROLLBACK")
                self.store.update(
                    replace(
                        meta,
                        ota_state=OtaState.FAILED,
                        boot_attempts=0,
                        pending_fw_version=0,
                    )
                )
                return False

            self._say(f"🚀 BOOTING PENDING SLOT {meta.pending_slot} (TEST MODE)")
            self.store.update(
                replace(
                    meta,
                    ota_state=OtaState.BOOT_TEST,
                    boot_attempts=meta.boot_attempts + 1,
                )
            )
            return True

        self._say(f"🔎 VERIFYING ACTIVE SLOT {meta.active_slot}")
        if not self.verify_firmware(
            meta.active_slot, meta.active_fw_version, meta.min_allowed_version
        ):
            self._say("❌ ACTIVE INVALID → FACTORY")
            return False

        self._say(f"✅ BOOTING ACTIVE SLOT {meta.active_slot}")
        return True