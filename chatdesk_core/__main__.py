import sys

from chatdesk_core.main import main

sys.exit(main())
