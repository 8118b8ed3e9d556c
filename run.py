import sys

from housegen.run import main

if __name__ == "__main__":
    # Generate a building with the sample program; pass --seed to reproduce one.
    sys.exit(main())
