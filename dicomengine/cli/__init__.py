# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""The ``dicomengine`` command line interface."""
