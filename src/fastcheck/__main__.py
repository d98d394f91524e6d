"""Allow ``python -m fastcheck``."""

from .cli import main

main()
