"""Conversion between boolean flag arrays and byte buffers.

Flags are stored one byte per element (0 or 1), in C order, so that a
packed buffer can be handed to code that expects a flat ``char`` array.
"""

import numpy as np

from .errors import SizeMismatchError


def pack_bools(flags, out=None):
    """Convert a boolean array to a flat byte buffer.

    Parameters
    ----------
    flags : array-like of bool
        Flags of any shape. They are traversed in C order.
    out : ndarray of uint8, optional
        Pre-sized destination. If not given, a new buffer is allocated.

    Returns
    -------
    out : 1D ndarray of uint8
        The packed flags

    Raises
    ------
    SizeMismatchError
        if `out` is given and its size differs from the number of flags
    """
    flags = np.asarray(flags, dtype=np.bool_)
    if out is None:
        out = np.empty(flags.size, np.uint8)
    elif out.size != flags.size:
        raise SizeMismatchError(
            'array length mismatch: {} flags, {} bytes'.format(flags.size, out.size))
    np.copyto(out, flags.reshape(out.shape), casting='unsafe')
    return out


def unpack_bools(packed, out=None):
    """Convert a byte buffer back to boolean flags.

    Any non-zero byte is treated as ``True``.

    Parameters
    ----------
    packed : array-like of uint8
        Packed flags, as produced by :func:`pack_bools`
    out : ndarray of bool, optional
        Pre-sized destination of any shape, filled in C order. If not
        given, a new 1D array is allocated.

    Returns
    -------
    out : ndarray of bool

    Raises
    ------
    SizeMismatchError
        if `out` is given and its size differs from the length of `packed`
    """
    packed = np.asarray(packed, dtype=np.uint8).ravel()
    if out is None:
        out = np.empty(packed.size, np.bool_)
    elif out.size != packed.size:
        raise SizeMismatchError(
            'array length mismatch: {} bytes, {} flags'.format(packed.size, out.size))
    np.copyto(out, packed.reshape(out.shape) != 0)
    return out
