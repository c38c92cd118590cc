"""
Tests for the report service.

These tests verify:
  - Period resolution for ytd, fy-1 and fy-2, including financial-year rollover
  - Statement bucketing by category and sign, inside the window only
  - Balance-as-at replay from the earliest month's opening balance
  - Asset labels, ordering and the fixed notes
  - An unknown period is rejected before the store is touched
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from club_finance.exceptions import InvalidPeriodError
from club_finance.schemas.ledger import CamelModel, LedgerTransaction, MonthlyLedger
from club_finance.schemas.report import BalanceSheetSection, ReportLineItem
from club_finance.services import report_service
from club_finance.services.ledger_store import LedgerStore
from conftest import FIXED_NOW, MemoryDocumentStore


def _txn(txn_id, day, amount, category="", running="0.00"):
    return LedgerTransaction(
        id=txn_id,
        date=day,
        category=category,
        description=txn_id,
        amount=Decimal(amount),
        running_balance=Decimal(running),
    )


def _ledger(month, opening, closing, transactions=(), ledger_type="BANK"):
    return MonthlyLedger(
        pk=f"LEDGER#{ledger_type}#{month}",
        month=month,
        type=ledger_type,
        opening_balance=Decimal(opening),
        closing_balance=Decimal(closing),
        transactions=list(transactions),
    )


class TestResolvePeriod:
    """Tests for resolve_period()."""

    def test_fy_minus_one_from_march(self):
        """On 15 Mar 2025 the last complete year is FY 2024."""
        period = report_service.resolve_period("fy-1", FIXED_NOW)

        assert period.label == "FY 2024"
        assert period.start == datetime(2023, 7, 1, tzinfo=timezone.utc)
        assert period.end == datetime(2024, 6, 30, 23, 59, 59, tzinfo=timezone.utc)

    def test_fy_minus_two_from_march(self):
        period = report_service.resolve_period("fy-2", FIXED_NOW)
        assert period.label == "FY 2023"
        assert period.start.date() == date(2022, 7, 1)
        assert period.end.date() == date(2023, 6, 30)

    def test_ytd_from_march(self):
        period = report_service.resolve_period("ytd", FIXED_NOW)
        assert period.label == "Current YTD"
        assert period.start == datetime(2024, 7, 1, tzinfo=timezone.utc)
        assert period.end == FIXED_NOW

    def test_ytd_from_august_starts_this_july(self):
        now = datetime(2025, 8, 2, tzinfo=timezone.utc)
        period = report_service.resolve_period("ytd", now)
        assert period.start.date() == date(2025, 7, 1)

    def test_first_of_july_starts_a_new_year(self):
        now = datetime(2025, 7, 1, tzinfo=timezone.utc)
        assert report_service.resolve_period("fy-1", now).label == "FY 2025"

    def test_thirtieth_of_june_is_still_the_old_year(self):
        now = datetime(2025, 6, 30, 12, tzinfo=timezone.utc)
        assert report_service.resolve_period("fy-1", now).label == "FY 2024"

    def test_timezone_of_now_is_kept(self):
        sydney = timezone(timedelta(hours=10))
        now = datetime(2025, 3, 15, tzinfo=sydney)
        period = report_service.resolve_period("fy-1", now)
        assert period.start.tzinfo is sydney
        assert period.end.tzinfo is sydney

    @pytest.mark.parametrize("key", ["", "FY-1", "fy-3", "last-year"])
    def test_unknown_key_rejected(self, key):
        with pytest.raises(InvalidPeriodError):
            report_service.resolve_period(key, FIXED_NOW)


class TestBuildStatement:
    """Tests for build_statement()."""

    LEDGERS = {
        "BANK": [
            _ledger("2024-06", "0.00", "0.00", [
                _txn("before-window", date(2024, 6, 30), "500.00", "Membership"),
            ]),
            _ledger("2024-07", "0.00", "0.00", [
                _txn("m1", date(2024, 7, 1), "50.00", "Membership"),
                _txn("m2", date(2024, 7, 3), "25.50", "Membership"),
                _txn("e1", date(2024, 7, 4), "-40.00", "Equipment"),
                _txn("u1", date(2024, 7, 5), "10.00", ""),
                _txn("u2", date(2024, 7, 6), "-3.00", "   "),
                _txn("z1", date(2024, 7, 7), "0.00", "Misc"),
            ]),
        ],
        "CASH": [
            _ledger("2024-07", "0.00", "0.00", [
                _txn("c1", date(2024, 7, 8), "-12.25", "Equipment"),
            ], ledger_type="CASH"),
        ],
    }

    def test_buckets_by_category_across_types(self):
        statement = report_service.build_statement(
            date(2024, 7, 1), date(2024, 7, 31), self.LEDGERS,
        )

        assert [(i.label, i.amount) for i in statement.income] == [
            ("Membership", Decimal("75.50")),
            ("Misc", Decimal("0.00")),
            ("Uncategorised", Decimal("10.00")),
        ]
        assert [(i.label, i.amount) for i in statement.expenditure] == [
            ("Equipment", Decimal("52.25")),
            ("Uncategorised", Decimal("3.00")),
        ]
        assert statement.total_income == Decimal("85.50")
        assert statement.total_expenditure == Decimal("55.25")
        assert statement.net_result == Decimal("30.25")

    def test_window_is_inclusive_at_both_ends(self):
        statement = report_service.build_statement(
            date(2024, 6, 30), date(2024, 7, 1), self.LEDGERS,
        )
        assert statement.total_income == Decimal("550.00")
        assert statement.expenditure == []

    def test_no_transactions_gives_zero_totals(self):
        statement = report_service.build_statement(date(2020, 1, 1), date(2020, 12, 31), self.LEDGERS)
        assert statement.income == []
        assert statement.net_result == Decimal("0.00")


class TestBalanceAsAt:
    """Tests for ledger_balance_as_at()."""

    LEDGERS = [
        _ledger("2024-06", "100.00", "160.00", [
            _txn("a", date(2024, 6, 1), "-40.00"),
            _txn("b", date(2024, 6, 2), "100.00"),
        ]),
        _ledger("2024-07", "160.00", "150.00", [
            _txn("c", date(2024, 7, 10), "-10.00"),
        ]),
    ]

    def test_replays_up_to_end_date(self):
        assert report_service.ledger_balance_as_at(self.LEDGERS, date(2024, 6, 1)) == Decimal("60.00")
        assert report_service.ledger_balance_as_at(self.LEDGERS, date(2024, 6, 30)) == Decimal("160.00")
        assert report_service.ledger_balance_as_at(self.LEDGERS, date(2024, 7, 9)) == Decimal("160.00")
        assert report_service.ledger_balance_as_at(self.LEDGERS, date(2025, 1, 1)) == Decimal("150.00")

    def test_seeded_from_earliest_opening_balance(self):
        """Later months' opening balances are not used."""
        ledgers = [
            _ledger("2024-06", "100.00", "100.00"),
            _ledger("2024-07", "999.00", "999.00"),
        ]
        assert report_service.ledger_balance_as_at(ledgers, date(2024, 7, 31)) == Decimal("100.00")

    def test_no_month_before_end_gives_none(self):
        assert report_service.ledger_balance_as_at(self.LEDGERS, date(2024, 5, 31)) is None

    def test_input_order_does_not_matter(self):
        reversed_ledgers = list(reversed(self.LEDGERS))
        assert report_service.ledger_balance_as_at(reversed_ledgers, date(2024, 7, 31)) == Decimal("150.00")


class TestAssetsAndNotes:
    """Tests for build_assets(), asset_label() and build_notes()."""

    @pytest.mark.parametrize(
        "ledger_type, label",
        [
            ("BANK", "Bank account"),
            ("CASH", "Cash on hand"),
            ("CARD", "Card balance"),
            ("PAYPAL", "PAYPAL ledger"),
        ],
    )
    def test_asset_labels(self, ledger_type, label):
        assert report_service.asset_label(ledger_type) == label

    def test_assets_sorted_by_label(self):
        ledgers_by_type = {
            "PAYPAL": [_ledger("2024-06", "5.00", "5.00", ledger_type="PAYPAL")],
            "CASH": [_ledger("2024-06", "20.00", "20.00", ledger_type="CASH")],
            "BANK": [_ledger("2024-06", "100.00", "100.00")],
        }
        assets = report_service.build_assets(date(2024, 6, 30), ledgers_by_type)
        assert [asset.label for asset in assets] == ["Bank account", "Cash on hand", "PAYPAL ledger"]

    def test_type_without_history_is_omitted(self):
        ledgers_by_type = {
            "BANK": [_ledger("2024-06", "100.00", "100.00")],
            "CASH": [_ledger("2025-01", "20.00", "20.00", ledger_type="CASH")],
        }
        sheet = report_service.build_balance_sheet(date(2024, 6, 30), ledgers_by_type)
        assert [asset.label for asset in sheet.assets] == ["Bank account"]
        assert sheet.liabilities == []
        assert sheet.total_assets == Decimal("100.00")
        assert sheet.equity == Decimal("100.00")
        assert sheet.equity_label == "Accumulated funds"

    def test_notes_itemize_balances(self):
        assets = [
            ReportLineItem(label="Bank account", amount=Decimal("1234.5")),
            ReportLineItem(label="Cash on hand", amount=Decimal("-12")),
        ]
        notes = report_service.build_notes(assets)

        assert [note.title for note in notes] == ["Bank accounts", "Grants", "Loans", "Trust money"]
        assert notes[0].details == [
            "Bank account: $1234.50",
            "Cash on hand: $-12.00",
            "Balances derived from ledger transactions.",
        ]
        assert notes[1].details == ["Not available from ledgers; requires separate grant register."]

    def test_notes_without_balances(self):
        notes = report_service.build_notes([])
        assert notes[0].details == ["No ledger balances available for the period."]


class TestBuildReport:
    """Tests for build_report() and generate_report()."""

    def test_format_report_date(self):
        assert report_service.format_report_date(date(2023, 7, 1)) == "1 Jul 2023"
        assert report_service.format_report_date(date(2024, 12, 25)) == "25 Dec 2024"

    def test_format_report_date_ignores_locale(self):
        """Month names never go through strftime, so LC_TIME cannot change them."""
        class NoStrftimeDate(date):
            def strftime(self, fmt):
                raise AssertionError("locale-dependent formatting")

        months = [
            report_service.format_report_date(NoStrftimeDate(2024, m, 3)).split()[1]
            for m in range(1, 13)
        ]
        assert months == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ]

    def test_fy_report_headings(self):
        period = report_service.resolve_period("fy-1", FIXED_NOW)
        report = report_service.build_report(period, {})

        assert report.period == "fy-1"
        assert report.label == "FY 2024"
        assert report.range == "1 Jul 2023 - 30 Jun 2024"
        assert report.as_at == "As at 30 Jun 2024"
        assert report.balance_sheet.assets == []
        assert len(report.notes) == 4

    async def test_generate_report_from_store(self, memory_store):
        await LedgerStore(memory_store).save("BANK", _ledger("2024-06", "100.00", "160.00", [
            _txn("a", date(2024, 6, 1), "-40.00", "Equipment"),
            _txn("b", date(2024, 6, 2), "100.00", "Sponsorship"),
        ]))

        report = await report_service.generate_report(memory_store, "fy-1", FIXED_NOW)

        assert report.statement.total_income == Decimal("100.00")
        assert report.statement.total_expenditure == Decimal("40.00")
        assert report.statement.net_result == Decimal("60.00")
        assert report.balance_sheet.assets[0].amount == Decimal("160.00")
        assert report.notes[0].details[0] == "Bank account: $160.00"

    async def test_unknown_period_reads_nothing(self):
        class CountingStore(MemoryDocumentStore):
            calls = 0

            async def list(self, prefix):
                CountingStore.calls += 1
                return await super().list(prefix)

        store = CountingStore()
        with pytest.raises(InvalidPeriodError):
            await report_service.generate_report(store, "fy-9", FIXED_NOW)
        assert CountingStore.calls == 0


class TestReportSchemas:
    """Report models share the camelCase base used by ledger documents."""

    def test_report_fields_are_camel_case(self):
        sheet = BalanceSheetSection(total_assets=Decimal("1.5"))
        data = sheet.model_dump(mode="json", by_alias=True)

        assert issubclass(BalanceSheetSection, CamelModel)
        assert data["totalAssets"] == 1.5
        assert data["equityLabel"] == "Accumulated funds"
