#!/usr/bin/env python3
"""IntervalTimer - entry point.

Run with:
    python main.py --workout 40 --rest 20 --rounds 8
    python -m intervaltimer
"""

from intervaltimer.__main__ import main


if __name__ == "__main__":
    raise SystemExit(main())
