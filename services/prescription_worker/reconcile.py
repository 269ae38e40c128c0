"""
Reconciliation sweep entry point.

Re-enqueues recordings that were stored but never picked up by the worker.
Run with ``--once`` from a scheduler, or without it as a long-lived process.
"""

import argparse

import ddtrace.auto  # noqa: F401
from doctorcare_common import setup_logging

from prescription_worker.dependencies import get_reconciler


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--once", action="store_true", help="run a single sweep and exit"
    )
    args = parser.parse_args(argv)

    setup_logging()
    reconciler = get_reconciler()
    if args.once:
        reconciler.sweep()
    else:
        reconciler.run_forever()


if __name__ == "__main__":
    main()
