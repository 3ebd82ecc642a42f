"""OFX 1.02 bank statement decoder and viewer."""

from __future__ import annotations

import logging
from importlib import metadata as _metadata

from ofx_viewer.decoder import decode, decode_bytes
from ofx_viewer.header import DEFAULT_POLICY, VersionPolicy

__all__ = ['DEFAULT_POLICY', 'VersionPolicy', 'decode', 'decode_bytes']

logging.getLogger(__name__).addHandler(logging.NullHandler())


def __getattr__(name: str) -> str:
    """Provide dynamic attributes such as ``__version__`` from package metadata."""

    if name == '__version__':
        return _metadata.version('ofx-viewer')
    raise AttributeError(name)
