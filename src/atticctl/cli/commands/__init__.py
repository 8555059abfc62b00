# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/cli/commands/__init__.py

"""
Command handlers for atticctl CLI operations.

This package contains the per-command logic, separated from the CLI
interface layer. Commands are organized by type:

- info: Read-only commands (config, list-configs, show-key, list-repo, list-archive, info, verify-*)
- actions: Commands that change state (init, backup, delete, repair, restore, mount, break-lock)
"""
