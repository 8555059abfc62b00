# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.16
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/__main__.py

from atticctl.cli.main import cli_main

if __name__ == "__main__":
    cli_main()
