"""Allow ``python -m too``."""

from .cli import main

if __name__ == "__main__":
    main()
