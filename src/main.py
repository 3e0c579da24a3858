#!/usr/bin/env python3
"""
Bouncer launcher: close matching X11 windows and wait for them to disappear.
"""
import sys

from Bouncer.cli import main

if __name__ == "__main__":
    sys.exit(main())
