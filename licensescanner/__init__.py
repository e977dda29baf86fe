# -*- coding: utf-8 -*-
"""Location: ./licensescanner/__init__.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Org License Scanner - audits every repository of a GitHub organization for
dependencies with blacklisted or unknown licenses.
"""

__copyright__ = "Copyright 2026"
__license__ = "Apache 2.0"
__version__ = "1.0.0"
__description__ = "Organization-wide dependency license scanner"
__packages__ = ["licensescanner"]
