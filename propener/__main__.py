import sys

from propener.cli import main

sys.exit(main())
