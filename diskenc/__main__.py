import sys

from diskenc.launcher import main

sys.exit(main())
