import csv
import logging
import os
import sys
from decimal import Decimal
from typing import List, Optional, TextIO, Tuple

from models import Account
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"


def get_log_level() -> int:
    """Read the log level name from the environment. Unknown names fall back to WARNING."""
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())
    if not isinstance(level, int):
        return logging.WARNING
    return level


def configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def format_decimal(value: Decimal) -> str:
    """Format decimal without exponent, removing trailing zeros. Never rounds."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def write_accounts(accounts: List[Tuple[int, Account]], out: TextIO) -> None:
    print("client,available,held,total,locked", file=out)
    for client_id, account in accounts:
        print(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}",
            file=out,
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        report = engine.process_file(filepath)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    write_accounts(report.accounts, sys.stdout)
    return 0 if report.succeeded else 1


def cli() -> None:
    configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
