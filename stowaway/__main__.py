"""Run Stowaway with `python -m stowaway`."""

import sys

from stowaway.cli import main

sys.exit(main())
