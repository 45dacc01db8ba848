"""CLI entry point for running udping as a module."""

from .main import run


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
