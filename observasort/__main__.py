import sys

from observasort.app import main

sys.exit(main())
