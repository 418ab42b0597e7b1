"""Module entrypoint to run Peka via `python -m peka`."""

from peka.cli import main


def run() -> None:
    """Dispatch to the console script handler."""

    main()


if __name__ == "__main__":  # pragma: no cover
    run()
