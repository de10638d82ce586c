import sys

from funclint.cli import main

sys.exit(main())
