# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Helper utilities for working with encoded DICOM data."""
