"""Allow ``python -m gotest_report``."""

import sys

from gotest_report.main import main

sys.exit(main())
