"""Entry point for ``python -m hashmark_cli`` and the ``hashmark`` console script."""

import sys


def main() -> int:
    from .main import main as cli_main

    return cli_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
