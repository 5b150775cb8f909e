import sys

from smalilsp.cli import main

sys.exit(main())
