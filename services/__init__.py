"""
Siblings loader services.

- resolver: maps a target and overrides to a storage location
- fetcher: downloads the sibling file atomically with retries
- launcher: runs the consumer process
- orchestrator: command line entry point tying the steps together
"""

from services.resolver import resolve
from services.fetcher import fetch, reuse_local
from services.launcher import build_launch_spec, launch
from services.orchestrator import main

__all__ = [
    'resolve',
    'fetch',
    'reuse_local',
    'build_launch_spec',
    'launch',
    'main',
]
