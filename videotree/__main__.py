"""Module entrypoint for ``python -m videotree``."""

from .cli import main


if __name__ == "__main__":
    main()
