import sys

from cadastral_exporter.main import main

sys.exit(main())
