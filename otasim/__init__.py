"""Simulated dual-slot OTA firmware update: flash, A/B metadata, image signatures, watchdog and bootloader."""

__version__ = "0.1.0"