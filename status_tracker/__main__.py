import sys

from status_tracker.main import main

sys.exit(main())
