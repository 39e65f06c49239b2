import sys

from cemantix_solver.cli import main

sys.exit(main())
