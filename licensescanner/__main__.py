# -*- coding: utf-8 -*-
"""Location: ./licensescanner/__main__.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Allow ``python -m licensescanner``.
"""

# Standard
import sys

# First-Party
from licensescanner.main import main

sys.exit(main())
