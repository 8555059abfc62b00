# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/__init__.py

"""Command Line Interface package for atticctl."""

from .main import cli_main as main, app

__all__ = ['main', 'app']
