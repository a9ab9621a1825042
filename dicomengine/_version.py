# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Pure python engine for parsing, de-identifying, rendering and validating
DICOM data."""
import re
from typing import cast, Match


__version__: str = '1.0.0'

result = cast(Match[str], re.match(r'(\d+\.\d+\.\d+).*', __version__))
__version_info__ = tuple(result.group(1).split('.'))


# DICOM Standard edition the static tables were taken from
__dicom_version__: str = '2023b'
