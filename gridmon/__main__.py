import sys

from gridmon.cli import main

sys.exit(main())
