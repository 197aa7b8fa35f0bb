import sys

from matwarp.cli import main

sys.exit(main())
