import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_io import parse_csv_row, read_transactions, format_decimal, write_accounts
from errors import MalformedRow
from models import Transaction, TransactionType, ClientAccount, ProcessingStats


class TestParseCsvRow:
    def test_deposit(self):
        transaction = parse_csv_row(["deposit", "1", "2", "1.5"])
        assert transaction == Transaction(TransactionType.DEPOSIT, 1, 2, Decimal("1.5"))

    def test_whitespace_and_case_tolerated(self):
        transaction = parse_csv_row(["   Deposit ", " 55     ", "     123 ", "    17.64  "])
        assert transaction == Transaction(TransactionType.DEPOSIT, 55, 123, Decimal("17.64"))

    def test_dispute_without_amount_column(self):
        assert parse_csv_row(["dispute", "1", "1"]) == Transaction(TransactionType.DISPUTE, 1, 1)

    def test_dispute_with_empty_amount_column(self):
        assert parse_csv_row(["chargeback", "1", "1", " "]) == Transaction(TransactionType.CHARGEBACK, 1, 1)

    @pytest.mark.parametrize("row", [
        [],
        ["corn", "potato"],
        ["deposit", "1", "1", "1.0", "extra"],
        ["bacon", "55", "123", "17.64"],
        ["deposit", "invalidclient", "1", "1.33"],
        ["deposit", "3", "invalidtx", "1.33"],
        ["deposit", "3", "3", "invalidamount"],
        ["deposit", "3", "3", "NaN"],
        ["deposit", "3", "3"],
        ["withdrawal", "3", "3", ""],
        ["dispute", "3", "3", "1.0"],
        ["deposit", "-1", "1", "1.0"],
        ["deposit", "65536", "1", "1.0"],
        ["deposit", "1", "4294967296", "1.0"],
        ["deposit", "1_0", "1", "1.0"],
        ["deposit", "1", "1_0", "1.0"],
        ["deposit", "+1", "1", "1.0"],
        ["deposit", "1", "1", "1_000"],
        ["deposit", "1", "1", "1e5"],
        ["deposit", "1", "1", "Infinity"],
        ["deposit", "1", "1", "."],
        ["deposit", "1", "1", "0." + "0" * 28 + "1"],
        ["deposit", "1", "1", "79228162514264337593543950336"],
        ["withdrawal", "1", "1", "-79228162514264337593543950336"],
        ["deposit", "1", "1", "1" + "0" * 40],
    ])
    def test_malformed(self, row):
        with pytest.raises(MalformedRow):
            parse_csv_row(row)

    def test_amount_bounds(self):
        largest = parse_csv_row(["deposit", "1", "1", "79228162514264337593543950335"])
        assert largest.amount == Decimal("79228162514264337593543950335")

        smallest = parse_csv_row(["deposit", "1", "2", "0." + "0" * 27 + "1"])
        assert smallest.amount == Decimal("1E-28")

        assert parse_csv_row(["deposit", "1", "3", "5."]).amount == Decimal("5")
        assert parse_csv_row(["deposit", "1", "4", ".25"]).amount == Decimal("0.25")

    def test_id_bounds(self):
        assert parse_csv_row(["deposit", "65535", "4294967295", "1"]).client_id == 65535
        assert parse_csv_row(["deposit", "0", "0", "1"]).transaction_id == 0

    def test_negative_amount_reaches_core(self):
        # amount sign is a core policy, not a parse error
        assert parse_csv_row(["withdrawal", "1", "1", "-1"]).amount == Decimal("-1")


class TestReadTransactions:
    def test_reads_in_order_and_skips_malformed(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "deposit, x, 2, 1.0",
            "",
            "dispute, 1, 1,",
            "resolve, 1, 1",
        ]))
        stats = ProcessingStats()

        transactions = list(read_transactions(str(csv_file), stats))

        assert [t.transaction_type for t in transactions] == [
            TransactionType.DEPOSIT,
            TransactionType.DISPUTE,
            TransactionType.RESOLVE,
        ]
        assert stats.skipped == 1

    def test_logs_skipped_rows(self, tmp_path, caplog):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\nbacon,1,1,1.0\n")

        assert list(read_transactions(str(csv_file))) == []
        assert "Skipping line 2" in caplog.text
        assert "unknown transaction type 'bacon'" in caplog.text

    def test_undecodable_bytes_skip_row(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_bytes(
            b"type,client,tx,amount\n"
            b"deposit,1,1,1.0\n"
            b"deposit,1,2,\xff\xfe\n"
            b"deposit,1,3,2.0\n"
        )
        stats = ProcessingStats()

        transactions = list(read_transactions(str(csv_file), stats))

        assert [t.transaction_id for t in transactions] == [1, 3]
        assert stats.skipped == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_transactions(str(tmp_path / "missing.csv")))


class TestWriteAccounts:
    def test_format_large_decimal(self):
        assert format_decimal(Decimal("10000000000000000000000000")) == "10000000000000000000000000.0000"
        assert format_decimal(Decimal("1000000000000000000000000.0001")) == "1000000000000000000000000.0001"
        assert format_decimal(Decimal("158456325028528675187087900670")) == "158456325028528675187087900670.0000"

    def test_format_decimal(self):
        assert format_decimal(Decimal("1.5")) == "1.5000"
        assert format_decimal(Decimal("0")) == "0.0000"
        assert format_decimal(Decimal("-30")) == "-30.0000"
        assert format_decimal(Decimal("2.12345")) == "2.1234"

    def test_write_accounts(self):
        accounts = [
            ClientAccount(client_id=2, available=Decimal("2")),
            ClientAccount(client_id=1, available=Decimal("3.0"), held=Decimal("0"), locked=True),
        ]
        stream = io.StringIO()

        write_accounts(accounts, stream)

        assert stream.getvalue() == (
            "client,available,held,total,locked\n"
            "1,3.0000,0.0000,3.0000,true\n"
            "2,2.0000,0.0000,2.0000,false\n"
        )
