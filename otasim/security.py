"""Firmware image hashing and simulated signature verification."""

import struct
from itertools import cycle, islice

DIGEST_SIZE = 32
SIGNATURE_MAX_SIZE = 64

PUBLIC_KEY = bytes(
    [
        0xA1, 0xB2, 0xC3, 0xD4,
        0x55, 0x66, 0x77, 0x88,
        0x10, 0x20, 0x30, 0x40,
        0x99, 0xAA, 0xBB, 0xCC,
    ]
)

_OFFSET_BASIS = 0x811C9DC5
_PRIME = 0x01000193
_MASK = 0xFFFFFFFF
_VERSION = struct.Struct("<I")


class SecurityError(Exception):
    """Base class for failed security checks."""


class InvalidParameterError(SecurityError, ValueError):
    """An argument was empty or out of range."""


class SignatureInvalidError(SecurityError):
    """The signature does not match the image."""


class VersionRollbackError(SecurityError):
    """The image version is older than the minimum allowed version."""


def _mix(state, byte):
    return ((state ^ byte) * _PRIME) & _MASK


def digest(data):
    """Return the 32-byte digest of ``data``; empty input is rejected."""
    data = bytes(data)
    if not data:
        raise InvalidParameterError("data must not be empty")

    state = _OFFSET_BASIS
    for byte in data:
        state = _mix(state, byte)

    out = bytearray()
    for position in range(DIGEST_SIZE):
        byte = (state >> ((position % 4) * 8)) & 0xFF
        out.append(byte)
        state = _mix(state, byte)
    return bytes(out)


def _signed_payload(image, image_version):
    try:
        version = _VERSION.pack(image_version)
    except struct.error as exc:
        raise InvalidParameterError(
            f"image version {image_version!r} is not a 32-bit unsigned value"
        ) from exc
    return bytes(image) + version


def sign_image(image, image_version, length=SIGNATURE_MAX_SIZE):
    """Build the signature of ``image`` at ``image_version``, ``length`` bytes long."""
    if not image:
        raise InvalidParameterError("image must not be empty")
    hashed = digest(_signed_payload(image, image_version))
    pairs = zip(cycle(hashed), cycle(PUBLIC_KEY))
    return bytes(h ^ k for h, k in islice(pairs, length))


def verify_signature(image, signature, image_version, min_allowed_version):
    """Check ``signature`` for ``image``; raise a SecurityError if it fails."""
    if not image or not signature:
        raise InvalidParameterError("image and signature must not be empty")

    if image_version < min_allowed_version:
        raise VersionRollbackError(
            f"version {image_version} is older than minimum {min_allowed_version}"
        )

    expected = sign_image(image, image_version, len(signature))
    if bytes(signature) != expected:
        raise SignatureInvalidError("signature does not match image")