# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Hex rendering of raw bytes for the reader and writer debug output."""

from binascii import b2a_hex


def bytes2hex(byte_string):
    """Return `byte_string` as space separated pairs of hex digits.

    >>> bytes2hex(b'DICM')
    '44 49 43 4d'
    """
    return b2a_hex(byte_string, ' ').decode()
