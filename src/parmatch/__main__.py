import sys

from parmatch.cli import main

sys.exit(main())
