import sys

from cmdpp.cli import main

sys.exit(main())
