"""Low-stock advisories are logged only for committed stock changes."""

import pytest
from protean import UnitOfWork, current_domain
from stockflow import service
from stockflow.inventory import advisories
from stockflow.inventory.stock import StockRecord


class _RecordingLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, event, **fields):
        self.warnings.append((event, fields))


@pytest.fixture()
def recorded(monkeypatch):
    recorder = _RecordingLogger()
    monkeypatch.setattr(advisories, "logger", recorder)
    return recorder.warnings


def test_committed_sale_logs_advisory(recorded, user_id, make_product):
    widget = make_product(name="Widget", quantity=12, reorder_threshold=10)
    order_id = service.create_order(user_id)
    service.add_or_merge_line(order_id, widget, 3)

    service.transition_state(order_id, "paid")

    assert len(recorded) == 1
    event, fields = recorded[0]
    assert event == "low_stock_detected"
    assert fields["product_id"] == widget
    assert fields["order_id"] == order_id
    assert fields["quantity"] == 9
    assert fields["reorder_threshold"] == 10


def test_sale_above_threshold_logs_nothing(recorded, user_id, make_product):
    widget = make_product(name="Widget", quantity=100, reorder_threshold=10)
    order_id = service.create_order(user_id)
    service.add_or_merge_line(order_id, widget, 3)

    service.transition_state(order_id, "paid")

    assert recorded == []


def test_rolled_back_withdrawal_logs_nothing(recorded, make_product):
    widget = make_product(name="Widget", quantity=12, reorder_threshold=10)
    repo = current_domain.repository_for(StockRecord)

    with pytest.raises(RuntimeError):
        with UnitOfWork():
            record = repo.get(widget)
            record.withdraw(5, order_id="order-that-never-commits")
            repo.add(record)
            raise RuntimeError("payment declined")

    assert recorded == []
    assert repo.get(widget).quantity == 12
