#!/usr/bin/env python3

import sys

from mc1r_pipeline.cli import main

if __name__ == "__main__":
    sys.exit(main())
