import sys

from media_normalizer.main import main

if __name__ == "__main__":
    sys.exit(main())
