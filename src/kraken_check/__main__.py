"""Allow ``python -m kraken_check``."""

from .main import main

main()
