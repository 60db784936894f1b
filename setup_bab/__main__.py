import sys

from setup_bab.runner import main

sys.exit(main())
