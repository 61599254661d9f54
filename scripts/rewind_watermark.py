#!/usr/bin/env python3
"""
Move the persisted watermark back so a failed day can be re-run.

The job saves the watermark as soon as a day's pick transactions have
been read, so a run that fails later leaves that day behind. Rewinding
to the start of that day makes the next run process it again.

Usage:
    python scripts/rewind_watermark.py 2026-10-17
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from restock_bot.config import settings
from restock_bot.window import JsonWindowStore, WindowState


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("day", help="Calendar day to process next (YYYY-MM-DD)")
    parser.add_argument("--config", default=settings.run_config_path, help="Run configuration file")
    args = parser.parse_args()

    watermark = datetime.strptime(args.day, "%Y-%m-%d")
    store = JsonWindowStore(args.config)
    config, state = store.load()

    print(f"Current watermark: {state.watermark.isoformat()}")
    store.save(config, WindowState(watermark=watermark, version=state.version))
    print(f"New watermark:     {watermark.isoformat()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
