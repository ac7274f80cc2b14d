# Inventory service tests
#
# Tests for:
# - Sequential product codes (first code, increments, no reuse)
# - Product validation and full-field updates
# - Entry/exit quantity arithmetic and the insufficient-stock rule
# - Cascade delete of movement history
# - Movement dating, ordering, filters and totals

from datetime import datetime

import pytest
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from models.product import Product
from models.stock import StockMovement
from services import inventory
from models.log import Log
from utils.errors import InsufficientStockError, NotFoundError, StorageError, ValidationError


def _entry(db, description, quantity, **kwargs):
    kwargs.setdefault("warehouse_keeper", "Ana")
    return inventory.record_entry(db, description=description, quantity=quantity, **kwargs)


def _exit(db, product_id, quantity, **kwargs):
    kwargs.setdefault("warehouse_keeper", "Ana")
    return inventory.record_exit(db, product_ref=product_id, quantity=quantity, **kwargs)


class TestProductCodes:

    def test_first_product_gets_code_one(self, db):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 10})
        assert product.code == 1

    def test_code_is_previous_max_plus_one(self, db):
        codes = [
            inventory.create_product(db, {"description": f"Item {i}", "quantity": 1}).code
            for i in range(3)
        ]
        assert codes == [1, 2, 3]

    def test_counter_starts_after_existing_codes(self, db):
        db.add(Product(code=41, description="Legacy", quantity=0))
        db.commit()

        product = inventory.create_product(db, {"description": "New", "quantity": 1})
        assert product.code == 42

    def test_codes_of_deleted_products_are_not_reused(self, db):
        inventory.create_product(db, {"description": "A", "quantity": 1})
        last = inventory.create_product(db, {"description": "B", "quantity": 1})
        inventory.delete_product(db, last.id)

        product = inventory.create_product(db, {"description": "C", "quantity": 1})
        assert product.code == 3

    def test_entry_for_new_description_takes_next_code(self, db):
        inventory.create_product(db, {"description": "Gloves", "quantity": 10})
        product, _ = _entry(db, "Masks", 4, unit="box")
        assert product.code == 2
        assert product.unit == "box"
        assert product.quantity == 4


class TestProductValidation:

    @pytest.mark.parametrize("data", [
        {"quantity": 5},
        {"description": "", "quantity": 5},
        {"description": "   ", "quantity": 5},
        {"description": "Gloves"},
        {"description": "Gloves", "quantity": None},
    ])
    def test_create_requires_description_and_quantity(self, db, data):
        with pytest.raises(ValidationError):
            inventory.create_product(db, data)

    def test_create_accepts_zero_quantity(self, db):
        product = inventory.create_product(db, {"description": "Tape", "quantity": 0})
        assert product.quantity == 0

    def test_create_rejects_negative_quantity(self, db):
        with pytest.raises(ValidationError):
            inventory.create_product(db, {"description": "Tape", "quantity": -1})

    def test_free_text_fields_default_to_empty(self, db):
        product = inventory.create_product(db, {"description": "Tape", "quantity": 2})
        assert product.unit == ""
        assert product.supplier == ""
        assert product.notes == ""

    def test_update_overwrites_fields_and_keeps_code(self, db):
        product = inventory.create_product(db, {
            "description": "Tape", "quantity": 2, "supplier": "ACME", "notes": "fragile",
        })
        updated = inventory.update_product(db, product.id, {
            "description": "Duct tape", "quantity": 7, "unit": "roll", "code": 999,
        })
        assert updated.code == product.code
        assert updated.description == "Duct tape"
        assert updated.quantity == 7
        assert updated.unit == "roll"
        # full overwrite: fields not sent are cleared
        assert updated.supplier == ""
        assert updated.notes == ""

    def test_update_unknown_product(self, db):
        with pytest.raises(NotFoundError):
            inventory.update_product(db, 404, {"description": "X", "quantity": 1})

    def test_list_products_sorted_by_description(self, db):
        for name in ("Tape", "Gloves", "Masks"):
            inventory.create_product(db, {"description": name, "quantity": 1})
        assert [p.description for p in inventory.list_products(db)] == ["Gloves", "Masks", "Tape"]


class TestEntriesAndExits:

    def test_entry_increments_existing_product_case_insensitively(self, db):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 10})
        updated, movement = _entry(db, "gLOVES", 5)

        assert updated.id == product.id
        assert updated.quantity == 15
        assert movement.type == "entry"
        assert db.query(Product).count() == 1

    def test_entry_matches_accented_description_in_any_case(self, db):
        product = inventory.create_product(db, {"description": "ÁLCOOL 70%", "quantity": 10})
        updated, _ = _entry(db, "álcool 70%", 5)

        assert updated.id == product.id
        assert updated.code == product.code
        assert updated.quantity == 15
        assert db.query(Product).count() == 1

    def test_renamed_product_is_matched_by_its_new_description(self, db):
        product = inventory.create_product(db, {"description": "Ether", "quantity": 1})
        inventory.update_product(db, product.id, {"description": "ÉTER", "quantity": 1})

        updated, _ = _entry(db, "éter", 2)
        assert updated.id == product.id
        assert updated.quantity == 3

    @pytest.mark.parametrize("kwargs", [
        {"description": "", "quantity": 1},
        {"description": "Gloves", "quantity": 0},
        {"description": "Gloves", "quantity": -3},
        {"description": "Gloves", "quantity": None},
        {"description": "Gloves", "quantity": 1, "warehouse_keeper": " "},
    ])
    def test_entry_validation(self, db, kwargs):
        kwargs.setdefault("warehouse_keeper", "Ana")
        with pytest.raises(ValidationError):
            inventory.record_entry(db, **kwargs)
        assert db.query(StockMovement).count() == 0

    def test_exit_more_than_available_is_rejected(self, db):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 15})

        with pytest.raises(InsufficientStockError):
            _exit(db, product.id, 20)

        db.expire_all()
        assert db.get(Product, product.id).quantity == 15
        assert db.query(StockMovement).count() == 0

    def test_exit_of_whole_stock_reaches_zero(self, db):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 15})
        updated, movement = _exit(db, product.id, 15, responsible_sector="Lab", recipient="Bruno")

        assert updated.quantity == 0
        assert movement.type == "exit"
        assert movement.responsible_sector == "Lab"
        assert movement.recipient == "Bruno"

    def test_exit_unknown_product(self, db):
        with pytest.raises(NotFoundError):
            _exit(db, 12345, 1)

    @pytest.mark.parametrize("kwargs", [
        {"product_ref": None, "quantity": 1},
        {"product_ref": 1, "quantity": 0},
        {"product_ref": 1, "quantity": 1, "warehouse_keeper": ""},
    ])
    def test_exit_validation(self, db, kwargs):
        inventory.create_product(db, {"description": "Gloves", "quantity": 5})
        kwargs.setdefault("warehouse_keeper", "Ana")
        with pytest.raises(ValidationError):
            inventory.record_exit(db, **kwargs)

    def test_exit_rejected_when_stock_drops_after_the_check(self, db, monkeypatch):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 10})
        load_product = inventory.get_product

        def drained_after_read(session, product_id):
            found = load_product(session, product_id)
            # a concurrent exit takes most of the stock after this read
            session.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(quantity=1)
                .execution_options(synchronize_session=False)
            )
            return found

        monkeypatch.setattr(inventory, "get_product", drained_after_read)
        with pytest.raises(InsufficientStockError):
            _exit(db, product.id, 5)
        monkeypatch.undo()

        db.expire_all()
        assert db.get(Product, product.id).quantity == 10
        assert db.query(StockMovement).count() == 0

    def test_failed_audit_write_rolls_back_the_entry(self, db, monkeypatch):
        product = inventory.create_product(db, {"description": "Gloves", "quantity": 10})

        def locked(*args, **kwargs):
            raise SQLAlchemyError("logs table locked")

        monkeypatch.setattr(inventory, "write_log", locked)
        with pytest.raises(StorageError):
            _entry(db, "Gloves", 5)

        db.expire_all()
        assert db.get(Product, product.id).quantity == 10
        assert db.query(StockMovement).count() == 0

    def test_audit_row_is_committed_with_the_movement(self, db):
        product, movement = _entry(db, "Gloves", 5, ip="10.0.0.7")

        (log,) = db.query(Log).filter(Log.action == "STOCK_ENTRY").all()
        assert log.actor == "Ana"
        assert log.ip == "10.0.0.7"
        assert log.meta == {"movement_id": movement.id, "product_id": product.id, "quantity": 5}

    def test_quantity_is_entries_minus_exits(self, db):
        product, _ = _entry(db, "Paper", 10)
        _entry(db, "paper", 7)
        _exit(db, product.id, 4)
        _entry(db, "PAPER", 1)
        _exit(db, product.id, 14)
        with pytest.raises(InsufficientStockError):
            _exit(db, product.id, 1)

        db.expire_all()
        assert db.get(Product, product.id).quantity == 10 + 7 - 4 + 1 - 14
        summary = inventory.movement_summary(db)
        assert summary == {"total_entries": 18, "total_exits": 18, "balance": 0}


class TestMovementDates:

    def test_calendar_date_is_stored_at_local_midday(self, db):
        _, movement = _entry(db, "Gloves", 1, occurred_at_date="2024-03-10")
        assert movement.occurred_at == datetime(2024, 3, 10, 12, 0, 0)

    def test_missing_date_defaults_to_now(self, db):
        before = datetime.now()
        _, movement = _entry(db, "Gloves", 1)
        after = datetime.now()
        assert before <= movement.occurred_at <= after

    def test_malformed_date_is_rejected(self, db):
        with pytest.raises(ValidationError):
            _entry(db, "Gloves", 1, occurred_at_date="10/03/2024")


class TestMovementHistory:

    def test_ordering_newest_day_first_then_latest_record(self, db):
        product, first = _entry(db, "Gloves", 5, occurred_at_date="2024-01-01")
        _, second = _entry(db, "Gloves", 5, occurred_at_date="2024-02-01")
        _, third = _exit(db, product.id, 2, occurred_at_date="2024-02-01")

        ids = [m.id for m in inventory.list_movements(db)]
        assert ids == [third.id, second.id, first.id]

    def test_movements_carry_their_product(self, db):
        product, _ = _entry(db, "Gloves", 5)
        (movement,) = inventory.list_movements(db)
        assert movement.product.id == product.id
        assert movement.product.code == product.code

    def test_dangling_movement_is_still_listed(self, db):
        db.add(StockMovement(
            product_id=999, type="entry", quantity=1,
            warehouse_keeper="Ana", occurred_at=datetime(2024, 1, 1, 12),
        ))
        db.commit()

        (movement,) = inventory.list_movements(db)
        assert movement.product is None

    def test_delete_product_cascades_to_movements(self, db):
        gloves, _ = _entry(db, "Gloves", 10)
        masks, _ = _entry(db, "Masks", 3)
        _exit(db, gloves.id, 4)

        description, removed = inventory.delete_product(db, gloves.id)

        assert description == "Gloves"
        assert removed == 2
        remaining = inventory.list_movements(db)
        assert [m.product_id for m in remaining] == [masks.id]

    def test_delete_unknown_product(self, db):
        with pytest.raises(NotFoundError):
            inventory.delete_product(db, 77)

    def test_filters_and_summary(self, db):
        gloves, _ = _entry(db, "Nitrile gloves", 10, occurred_at_date="2024-05-01")
        _entry(db, "Masks", 6, occurred_at_date="2024-05-02")
        _exit(db, gloves.id, 3, occurred_at_date="2024-05-03")

        assert len(inventory.list_movements(db, q="GLOVES")) == 2
        assert len(inventory.list_movements(db, q=str(gloves.code))) == 2
        assert len(inventory.list_movements(db, type="exit")) == 1
        # a lone start date selects that single day
        assert len(inventory.list_movements(db, date_from="2024-05-02")) == 1
        assert len(inventory.list_movements(db, date_from="2024-05-02", date_to="2024-05-03")) == 2
        assert len(inventory.list_movements(db, date_to="2024-05-01")) == 1

        summary = inventory.movement_summary(db, q="gloves")
        assert summary == {"total_entries": 10, "total_exits": 3, "balance": 7}

    def test_text_filter_is_accent_aware_and_literal(self, db):
        _entry(db, "Álcool 70%", 2)
        _entry(db, "Álcool 700 ml", 3)
        _entry(db, "tape_roll", 1)
        _entry(db, "tapeXroll", 4)

        assert [m.quantity for m in inventory.list_movements(db, q="70%")] == [2]
        assert len(inventory.list_movements(db, q="ÁLCOOL")) == 2
        assert [m.quantity for m in inventory.list_movements(db, q="tape_")] == [1]

    def test_invalid_type_filter(self, db):
        with pytest.raises(ValidationError):
            inventory.list_movements(db, type="transfer")
