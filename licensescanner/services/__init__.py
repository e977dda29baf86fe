# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/__init__.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Scanner services: dependency classification pipeline, GitHub access,
report rendering and publishing.
"""
