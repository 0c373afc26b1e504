"""Pytest configuration.

The package lives under `src/`. When the project is not installed (plain
`pytest` from a checkout) neither `src/` nor this directory is guaranteed to
be on `sys.path`, which breaks `import mailnorm` and the shared message
builders in `message_factory`.
"""

from __future__ import annotations

import sys
from pathlib import Path


TESTS_DIR = Path(__file__).resolve().parent
SRC_DIR = TESTS_DIR.parent / "src"

# NOTE: Insert at the front so the checkout wins over an older installed copy.
for path in (SRC_DIR, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
