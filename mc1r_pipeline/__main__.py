# mc1r_pipeline/__main__.py

import sys

from mc1r_pipeline.cli import main

sys.exit(main())
