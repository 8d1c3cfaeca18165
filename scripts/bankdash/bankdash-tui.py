#!/usr/bin/env python3
"""Thin entrypoint for the modular bankdash dashboard."""

from __future__ import annotations

from panel_core.app import main


if __name__ == "__main__":
    raise SystemExit(main())
