"""Allow ``python -m schoolsite``."""

import sys

from schoolsite.pipeline.site_builder.cli import main

if __name__ == "__main__":
    sys.exit(main())
