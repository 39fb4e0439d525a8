import sys

from lattice_planner.cli import main

sys.exit(main())
