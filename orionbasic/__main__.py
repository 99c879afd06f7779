import sys

from orionbasic.shell import main

sys.exit(main())
