"""Allow ``python -m autoassigner``."""

from autoassigner.cli.main import main

main()
