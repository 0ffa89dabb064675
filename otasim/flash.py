"""A simulated NOR flash device with optional power-loss injection."""

DEFAULT_SIZE = 4096
ERASED = 0xFF


class FlashOutOfBoundsError(IndexError):
    """An access reached outside the flash array."""

    def __init__(self, operation, addr, length):
        super().__init__(f"FLASH {operation} OOB (addr=0x{addr:X}, length={length})")
        self.operation = operation
        self.addr = addr
        self.length = length


class PowerLoss(Exception):
    """Power was cut while writing the given flash address."""

    def __init__(self, addr):
        super().__init__(f"POWER LOSS at flash address 0x{addr:04X}")
        self.addr = addr


class Flash:
    """Byte-addressed flash: erase sets bytes to 0xFF, writes can only clear bits."""

    def __init__(self, size=DEFAULT_SIZE):
        self.size = size
        self._cells = bytearray([ERASED]) * size
        self.power_cut_at = None

    def reset(self):
        """Erase the whole device and disarm any power cut."""
        self._cells[:] = bytes([ERASED]) * self.size
        self.power_cut_at = None

    def set_power_cut(self, addr):
        """Lose power when a write reaches ``addr``; ``None`` disarms it."""
        self.power_cut_at = addr

    def _check(self, operation, addr, length):
        if addr < 0 or length < 0 or addr + length > self.size:
            raise FlashOutOfBoundsError(operation, addr, length)

    def read(self, addr, length):
        """Return ``length`` bytes starting at ``addr``."""
        self._check("READ", addr, length)
        return bytes(self._cells[addr : addr + length])

    def write(self, addr, data):
        """Program ``data`` at ``addr``, ANDing it into the current contents."""
        data = bytes(data)
        self._check("WRITE", addr, len(data))
        for offset, value in enumerate(data):
            current = addr + offset
            if current == self.power_cut_at:
                raise PowerLoss(current)
            self._cells[current] &= value

    def erase(self, addr, length):
        """Set ``length`` bytes at ``addr`` back to the erased state."""
        self._check("ERASE", addr, length)
        self._cells[addr : addr + length] = bytes([ERASED]) * length

    def dump(self, addr, length):
        """Return a hex dump of the region, sixteen bytes per line."""
        self._check("DUMP", addr, length)
        lines = []
        for offset in range(0, length, 16):
            end = min(offset + 16, length)
            chunk = self._cells[addr + offset : addr + end]
            values = "".join(f"{byte:02X} " for byte in chunk)
            lines.append(f"\n0x{addr + offset:04X}: {values}")
        return "".join(lines) + "\n"