#!/usr/bin/env python
"""
Wrapper script to run the siblings loader.
Fetches the siblings file for a target from GCS and runs its consumer.

Usage:
  python load_siblings.py dev
  python load_siblings.py prod --project P --bucket B --key K
"""

from services.orchestrator import main

if __name__ == "__main__":
    raise SystemExit(main())
