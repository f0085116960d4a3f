import sys

from tasktree.cli.main import main

sys.exit(main())
