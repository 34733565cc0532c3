"""Cargo subcommand that profiles Rust executables with heaptrack.

The package resolves which build target a `cargo heaptrack` request refers to, builds it
through `cargo` with the JSON message format, picks the produced executable out of the
artifact stream and launches it under `heaptrack`.
"""

from __future__ import annotations
