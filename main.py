#!/usr/bin/env python3
"""Run the benchmark sweep driver from a source checkout (see benchsweep.main)."""

from benchsweep.main import cli

if __name__ == "__main__":
    cli()
