import sys

from embedded_assets.cli import main

sys.exit(main(sys.argv[1:]))
