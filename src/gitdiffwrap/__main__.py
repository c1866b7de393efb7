"""Allow ``python -m gitdiffwrap``."""

from gitdiffwrap.cli import main

main()
