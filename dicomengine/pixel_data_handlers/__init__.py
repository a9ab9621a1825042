# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Handlers for decoding the (7FE0,0010) *Pixel Data* element."""
