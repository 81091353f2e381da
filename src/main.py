import sys
import logging
from typing import List, Optional

from config import EngineConfig
from csv_io import write_accounts
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def configure_logging(config: EngineConfig) -> None:
    logging.basicConfig(
        level=config.log_level,
        format=config.log_format,
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    configure_logging(EngineConfig.from_env())

    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 1

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read transactions from {filepath}: {e}")
        return 1

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
