import sys

from sprite_layers.cli import main

if __name__ == "__main__":
    sys.exit(main())
