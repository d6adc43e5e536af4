"""
Custom encoders for output formats, keyed by format in ImageOptions.format_hooks.

A hook receives a prepared (already resized) image handle and returns the
encoded bytes. Hooks may be plain functions or coroutine functions.
"""

AVIF_DEFAULTS = {
    'quality': 60,
    'speed': 6,
}


def avif_hook(handle) -> bytes:
    """Encode a handle as AVIF using Pillow's AVIF plugin."""
    return handle.to_format('avif', **AVIF_DEFAULTS).to_bytes()
