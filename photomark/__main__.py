import sys

from photomark.app import main

sys.exit(main())
