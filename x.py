#!/usr/bin/env python3
"""
Development task wrapper for the crate in this directory.

Tasks always run from this file's directory, regardless of where it is
invoked from.

Usage:
    ./x.py check    Run cargo fix, fmt, cargo clippy and cargo doc
    ./x.py fmt      Run cargo fmt on the nightly toolchain
"""

from cargo_tasks.cli import main

if __name__ == "__main__":
    main()
