import sys

from toggle_pane.cli import main

if __name__ == "__main__":
    sys.exit(main())
