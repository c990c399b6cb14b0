import sys

from pyrackup.cli import main

sys.exit(main())
