"""Tests for the transaction unifier."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from pydantic import TypeAdapter

from agency_ledger.engine import statement_row, unify, unify_entity
from agency_ledger.models import (
    Currency,
    Customer,
    EntityType,
    Expense,
    Money,
    OpeningBalance,
    PaymentStatus,
    Purchase,
    Sale,
    Transaction,
    Voucher,
    VoucherKind,
)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


def _sale(id, day, total, customer_id="c1", is_return=False, hour=12):
    return Sale(
        id=id,
        timestamp=_at(day, hour),
        customer_id=customer_id,
        item_type="TypeA",
        quantity=2,
        total=Decimal(total),
        status=PaymentStatus.CREDIT,
        is_return=is_return,
    )


def _purchase(id, day, total, supplier_id="p1", is_return=False):
    return Purchase(
        id=id,
        timestamp=_at(day),
        supplier_id=supplier_id,
        item_type="TypeA",
        quantity=4,
        total_cost=Decimal(total),
        status=PaymentStatus.CREDIT,
        is_return=is_return,
    )


def _voucher(id, day, amount, kind, entity_id="c1", entity_type=EntityType.CUSTOMER, hour=12, notes=None):
    return Voucher(
        id=id,
        timestamp=_at(day, hour),
        entity_id=entity_id,
        entity_type=entity_type,
        voucher_kind=kind,
        amount=Decimal(amount),
        notes=notes,
    )


def _sides(entry):
    return entry.debit.amount, entry.credit.amount


class TestCustomerSigns:
    """Tests for customer debit/credit conventions."""

    def test_sale_is_debit(self):
        (entry,) = unify("c1", EntityType.CUSTOMER, sales=[_sale("s1", 1, "500")])
        assert _sides(entry) == (Decimal("500"), Decimal("0"))
        assert entry.reference == "sale"
        assert entry.source_id == "s1"

    def test_returned_sale_is_credit(self):
        (entry,) = unify("c1", EntityType.CUSTOMER, sales=[_sale("s1", 1, "500", is_return=True)])
        assert _sides(entry) == (Decimal("0"), Decimal("500"))
        assert entry.description == "Return: TypeA (2)"

    def test_receipt_is_credit_payment_is_debit(self):
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            vouchers=[
                _voucher("v1", 1, "300", VoucherKind.RECEIPT),
                _voucher("v2", 2, "50", VoucherKind.PAYMENT),
            ],
        )
        assert _sides(entries[0]) == (Decimal("0"), Decimal("300"))
        assert entries[0].description == "Cash receipt"
        assert _sides(entries[1]) == (Decimal("50"), Decimal("0"))
        assert entries[1].description == "Cash payment"

    def test_purchases_ignored_for_customers(self):
        entries = unify("c1", EntityType.CUSTOMER, purchases=[_purchase("p1", 1, "100", supplier_id="c1")])
        assert entries == ()


class TestSupplierSigns:
    """Tests for supplier debit/credit conventions."""

    def test_purchase_is_credit(self):
        (entry,) = unify("p1", EntityType.SUPPLIER, purchases=[_purchase("b1", 1, "1000")])
        assert _sides(entry) == (Decimal("0"), Decimal("1000"))

    def test_returned_purchase_is_debit(self):
        (entry,) = unify("p1", EntityType.SUPPLIER, purchases=[_purchase("b1", 1, "1000", is_return=True)])
        assert _sides(entry) == (Decimal("1000"), Decimal("0"))

    def test_payment_is_debit_receipt_is_credit(self):
        entries = unify(
            "p1",
            EntityType.SUPPLIER,
            vouchers=[
                _voucher("v1", 1, "400", VoucherKind.PAYMENT, "p1", EntityType.SUPPLIER),
                _voucher("v2", 2, "20", VoucherKind.RECEIPT, "p1", EntityType.SUPPLIER),
            ],
        )
        assert _sides(entries[0]) == (Decimal("400"), Decimal("0"))
        assert _sides(entries[1]) == (Decimal("0"), Decimal("20"))


class TestFiltering:
    """Tests for which records belong to an entity."""

    def test_other_entities_ignored(self):
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            sales=[_sale("s1", 1, "100"), _sale("s2", 1, "200", customer_id="c2")],
            vouchers=[_voucher("v1", 1, "50", VoucherKind.RECEIPT, entity_id="c2")],
        )
        assert [e.source_id for e in entries] == ["s1"]

    def test_voucher_entity_type_must_match(self):
        """Test a supplier voucher sharing a customer's id is not counted."""
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            vouchers=[_voucher("v1", 1, "50", VoucherKind.RECEIPT, "c1", EntityType.SUPPLIER)],
        )
        assert entries == ()


class TestOrdering:
    """Tests for row ordering."""

    def test_sorted_by_timestamp(self):
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            sales=[_sale("s2", 3, "100"), _sale("s1", 1, "100")],
            vouchers=[_voucher("v1", 2, "50", VoucherKind.RECEIPT)],
        )
        assert [e.source_id for e in entries] == ["s1", "v1", "s2"]

    def test_equal_timestamps_keep_source_order(self):
        """Test ties put sales before vouchers, each in input order."""
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            sales=[_sale("s1", 1, "100"), _sale("s2", 1, "100")],
            vouchers=[
                _voucher("v2", 1, "50", VoucherKind.RECEIPT),
                _voucher("v1", 1, "50", VoucherKind.RECEIPT),
            ],
        )
        assert [e.source_id for e in entries] == ["s1", "s2", "v2", "v1"]

    def test_opening_balance_always_first(self):
        """Test the opening balance leads even when dated after everything."""
        opening = OpeningBalance(
            entity_id="c1",
            money=Money(amount=Decimal("1000")),
            effective_date=date(2024, 6, 1),
        )
        entries = unify(
            "c1",
            EntityType.CUSTOMER,
            sales=[_sale("s1", 1, "100")],
            opening_balance=opening,
        )
        assert entries[0].reference == "opening_balance"
        assert entries[0].entry_date == date(2024, 6, 1)
        assert entries[1].source_id == "s1"


class TestOpeningBalance:
    """Tests for opening balance rows."""

    def test_negative_opening_is_credit(self):
        customer = Customer(id="c1", name="Ahmad", opening_balance=Decimal("-250"))
        (entry,) = unify_entity(customer, EntityType.CUSTOMER)
        assert _sides(entry) == (Decimal("0"), Decimal("250"))
        assert entry.description == "Opening balance"
        assert entry.entry_date == date(1970, 1, 1)

    def test_opening_uses_note_and_default_currency(self):
        customer = Customer(
            id="c1",
            name="Ahmad",
            opening_balance=Decimal("10"),
            opening_balance_note="Carried from paper ledger",
        )
        (entry,) = unify_entity(customer, EntityType.CUSTOMER, default_currency=Currency.SAR)
        assert entry.description == "Carried from paper ledger"
        assert entry.debit == Money(amount=Decimal("10"), currency=Currency.SAR)

    def test_zero_opening_produces_no_row(self):
        customer = Customer(id="c1", name="Ahmad", opening_balance=Decimal("0"))
        assert unify_entity(customer, EntityType.CUSTOMER) == ()


class TestDescriptions:

    def test_voucher_notes_replace_default(self):
        (entry,) = unify(
            "c1",
            EntityType.CUSTOMER,
            vouchers=[_voucher("v1", 1, "5", VoucherKind.RECEIPT, notes="Paid at the shop")],
        )
        assert entry.description == "Paid at the shop"

    def test_sale_description(self):
        (entry,) = unify("c1", EntityType.CUSTOMER, sales=[_sale("s1", 1, "5")])
        assert entry.description == "TypeA (2)"


class TestStatementRow:
    """Tests for building a row from any transaction kind."""

    def test_dispatches_on_kind(self):
        adapter = TypeAdapter(Transaction)
        records = [
            adapter.validate_python({
                "kind": "sale", "id": "s1", "timestamp": "2024-01-01T12:00:00Z",
                "customer_id": "c1", "item_type": "TypeA", "quantity": 2, "total": "500",
            }),
            adapter.validate_python({
                "kind": "purchase", "id": "b1", "timestamp": "2024-01-01T12:00:00Z",
                "supplier_id": "p1", "item_type": "TypeA", "quantity": 4, "total_cost": "900",
            }),
            adapter.validate_python({
                "kind": "voucher", "id": "v1", "timestamp": "2024-01-01T12:00:00Z",
                "entity_id": "c1", "entity_type": "customer", "voucher_kind": "receipt",
                "amount": "300",
            }),
            adapter.validate_python({
                "kind": "opening_balance", "entity_id": "c1",
                "money": {"amount": "1000", "currency": "YER"},
            }),
        ]
        rows = [statement_row(record) for record in records]

        assert [row.reference for row in rows] == ["sale", "purchase", "voucher", "opening_balance"]
        assert [_sides(row) for row in rows] == [
            (Decimal("500"), Decimal("0")),
            (Decimal("0"), Decimal("900")),
            (Decimal("0"), Decimal("300")),
            (Decimal("1000"), Decimal("0")),
        ]

    def test_expense_has_no_row(self):
        expense = Expense(id="e1", timestamp=_at(1), category="Rent", amount=Decimal("50"))
        with pytest.raises(ValueError):
            statement_row(expense)
