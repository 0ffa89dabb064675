# otasim

A small, self-contained simulation of an over-the-air (OTA) firmware update
flow with two slots. It models:

- a NOR-style flash device (`otasim.flash.Flash`). The device is 4096 bytes by
  default. Erasing sets bytes to `0xFF`, and writing can only clear bits
  because new data is ANDed into the current contents. A power cut can be armed
  at a chosen address with `set_power_cut`.
- metadata records kept in two blocks, A and B, each with a sequence number and
  a checksum (`otasim.metadata.MetadataStore`, `OtaMetadata`, `OtaState`,
  `checksum`). `MetadataStore.load` returns the newest valid record, or `None`
  if neither block is valid. `MetadataStore.update` writes the record to the
  other block with the next sequence number and returns the stored record.
- a toy image digest and signature scheme with rollback protection
  (`otasim.security.digest`, `sign_image`, `verify_signature`).
- a watchdog that raises `WatchdogReset` once it has seen `max_ticks` ticks
  without a kick (`otasim.watchdog.Watchdog`, default 5).
- a bootloader that picks a slot (`otasim.bootloader.Bootloader`,
  `slot_address`).
  - If the state is `COMMIT_PENDING` or `BOOT_TEST`, it verifies the pending
    slot.
  - If that check passes, it boots the pending slot in test mode and counts the
    attempt.
  - If the check fails, or three attempts have already been used, the state is
    set to `FAILED` and it rolls back.
  - Otherwise it verifies and boots the active slot.

The digest and signature are deliberately simple stand-ins, not real
cryptography.

## Installation

```
pip install .
```

## Running the scenario

```
otasim
```

The command takes no options other than `--help`. It does the following:

1. It programs a factory image at `0xA00` and a good image (version 5) in slot A.
2. It writes the initial metadata.
3. It runs two update scenarios:
   - **Bad image.** Slot B gets an image with a zeroed signature. The bootloader
     rejects it and rolls back.
   - **Hanging image.** Slot B gets a correctly signed image (version 6). It
     boots in test mode and then hangs. The watchdog resets it, and the message
     `🐶 WATCHDOG RESET (firmware unresponsive)` is printed.

Progress messages go to standard output, and the command exits with status 0.

The same run is available from Python as `otasim.simulation.run_simulation(out)`.
`out` is any text stream and defaults to standard output.

## Using the pieces

```python
from otasim.flash import Flash
from otasim.metadata import MetadataStore, OtaMetadata, OtaState
from otasim.watchdog import Watchdog
from otasim.bootloader import Bootloader, slot_address
from otasim.simulation import FirmwareMode, program_slot

flash = Flash(4096)
store = MetadataStore(flash)
program_slot(flash, slot_address(0), FirmwareMode.GOOD, 5)

store.update(OtaMetadata(
    active_slot=0,
    pending_slot=1,
    active_fw_version=5,
    min_allowed_version=3,
    ota_state=OtaState.IDLE,
))

booted = Bootloader(flash, store, Watchdog(5)).boot()  # True
print(flash.dump(0x200, 32))
```

### Bootloader

- `Bootloader.boot()` returns `True` when a slot was booted. It returns `False`
  when it falls back to the factory image or rolls back.
- `Bootloader.verify_firmware(slot, fw_version, min_allowed_version)` returns
  whether the image in that slot carries a valid signature.

### Security checks

`verify_signature` raises one of the following, all subclasses of
`SecurityError`, when an image is rejected:

- `VersionRollbackError`
- `SignatureInvalidError`
- `InvalidParameterError`, which is also a `ValueError`.

`digest` rejects empty input. `sign_image(image, image_version, length)`
produces a signature of `length` bytes, 64 by default.

### Flash errors

- Accesses outside the device raise `FlashOutOfBoundsError`, which is an
  `IndexError`.
- A write that reaches an armed power-cut address raises `PowerLoss`.
- `Flash.dump` returns the hex dump as a string and does not print it.

## What it does not do

- Flash contents live only in memory. Nothing is saved to or loaded from disk
  between runs.
- It does not talk to real devices.
- The `otasim` command runs only the fixed scenario described above. It has no
  options to choose other scenarios or to inject power cuts. Power cuts can be
  armed only through `Flash.set_power_cut` from Python.

## Tests

```
pip install '.[test]'
pytest
```