"""``python -m pyenrich``: evolve one star particle on the synthetic tables."""

import sys

from .driver import main

if __name__ == "__main__":
    main(sys.argv[1:])
