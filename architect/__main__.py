import sys

from architect.main import main

sys.exit(main())
