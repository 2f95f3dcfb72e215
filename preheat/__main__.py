"""Allow running preheat as ``python -m preheat``."""

from preheat.cli.main import main


if __name__ == "__main__":
    main()
