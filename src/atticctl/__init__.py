# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/__init__.py

"""atticctl - profile-driven front-end for the attic backup engine."""
