import csv
import logging
import re
from decimal import Context, Decimal
from typing import IO, Iterable, Iterator, List, Optional

from errors import MalformedRow
from models import Transaction, TransactionType, ClientAccount, ProcessingStats, BALANCE_PRECISION

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295

# Same bounds as a 96-bit decimal mantissa with scale up to 28
MAX_AMOUNT = Decimal("79228162514264337593543950335")
MAX_AMOUNT_SCALE = 28

INTEGER_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]
DECIMAL_PLACES = Decimal("0.0001")
OUTPUT_CONTEXT = Context(prec=BALANCE_PRECISION)


def parse_csv_row(row: List[str]) -> Transaction:
    """
    Parse one CSV row (type, client, tx[, amount]) into a Transaction.
    Raises MalformedRow if the row cannot describe a valid transaction.
    """
    fields = [field.strip() for field in row]
    if len(fields) not in (3, 4):
        raise MalformedRow(f"expected 3 or 4 fields, got {len(fields)}")

    try:
        transaction_type = TransactionType(fields[0].lower())
    except ValueError:
        raise MalformedRow(f"unknown transaction type {fields[0]!r}")

    client_id = _parse_int(fields[1], "client", MAX_CLIENT_ID)
    transaction_id = _parse_int(fields[2], "tx", MAX_TRANSACTION_ID)

    amount_str = fields[3] if len(fields) == 4 else ""
    amount = _parse_amount(amount_str) if amount_str else None

    if transaction_type.requires_amount and amount is None:
        raise MalformedRow(f"{transaction_type.value} requires an amount")
    if not transaction_type.requires_amount and amount is not None:
        raise MalformedRow(f"{transaction_type.value} must not carry an amount")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_int(value: str, name: str, maximum: int) -> int:
    if not INTEGER_PATTERN.fullmatch(value):
        raise MalformedRow(f"invalid {name} {value!r}")
    number = int(value)
    if number > maximum:
        raise MalformedRow(f"{name} {number} out of range 0..{maximum}")
    return number


def _parse_amount(value: str) -> Decimal:
    """Plain decimal notation only, within MAX_AMOUNT and at most MAX_AMOUNT_SCALE fractional digits."""
    if not AMOUNT_PATTERN.fullmatch(value):
        raise MalformedRow(f"invalid amount {value!r}")
    amount = Decimal(value)
    if -amount.as_tuple().exponent > MAX_AMOUNT_SCALE:
        raise MalformedRow(f"amount {value} has more than {MAX_AMOUNT_SCALE} fractional digits")
    if amount.copy_abs() > MAX_AMOUNT:
        raise MalformedRow(f"amount {value} exceeds {MAX_AMOUNT}")
    return amount


def read_transactions(filepath: str, stats: Optional[ProcessingStats] = None) -> Iterator[Transaction]:
    """
    Stream transactions from a CSV file in file order, skipping the header.
    Malformed rows, including ones with undecodable bytes, are logged and counted as skipped.
    """
    with open(filepath, "r", encoding="utf-8", errors="replace", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)
        for row in reader:
            if not row or all(not field.strip() for field in row):
                continue
            try:
                yield parse_csv_row(row)
            except MalformedRow as e:
                logger.warning(f"Skipping line {reader.line_num} {row}: {e}")
                if stats is not None:
                    stats.record_skipped()


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 fractional digits."""
    return f"{value.quantize(DECIMAL_PLACES, context=OUTPUT_CONTEXT):f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: IO[str]) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
