import sys

from optfile.cli import main

sys.exit(main())
