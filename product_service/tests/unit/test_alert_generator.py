"""
Unit tests for alert classification and the alert lifecycle.
"""

import pytest

from product_service.app.core.exceptions import AlertNotFound
from product_service.app.schemas.inventory import LedgerAdjustment
from product_service.app.services.alert_generator import (
    AlertGenerator,
    AlertSeverity,
    AlertThresholds,
    classify,
)


def _adjustment(product_id: str, new_quantity: int, reorder_point: int = 10) -> LedgerAdjustment:
    return LedgerAdjustment(
        product_id=product_id,
        product_name=f"Product {product_id}",
        reorder_point=reorder_point,
        requested_delta=-1,
        previous_quantity=new_quantity + 1,
        new_quantity=new_quantity,
    )


class TestClassify:
    """Test severity bands"""

    @pytest.mark.parametrize(
        "stock,reorder_point,expected",
        [
            (11, 10, None),
            (10, 10, AlertSeverity.MEDIUM),
            (6, 10, AlertSeverity.MEDIUM),
            (5, 10, AlertSeverity.HIGH),
            (1, 10, AlertSeverity.HIGH),
            (0, 10, AlertSeverity.CRITICAL),
            (0, 0, AlertSeverity.CRITICAL),
            (3, 0, None),
        ],
    )
    def test_bands(self, stock, reorder_point, expected):
        assert classify(stock, reorder_point) == expected

    def test_severity_never_decreases_as_stock_falls(self):
        previous_rank = 0
        for stock in range(15, -1, -1):
            severity = classify(stock, 10)
            rank = severity.rank if severity else 0
            assert rank >= previous_rank
            previous_rank = rank

    def test_custom_thresholds(self):
        thresholds = AlertThresholds(critical_stock_level=2, high_ratio=0.8)

        assert classify(2, 10, thresholds) == AlertSeverity.CRITICAL
        assert classify(8, 10, thresholds) == AlertSeverity.HIGH
        assert classify(9, 10, thresholds) == AlertSeverity.MEDIUM

    def test_invalid_ratio_rejected(self):
        with pytest.raises(ValueError):
            AlertThresholds(high_ratio=1.5)


class TestAlertGenerator:
    """Test raising, superseding and resolving alerts"""

    @pytest.mark.asyncio
    async def test_evaluate_above_reorder_point_raises_nothing(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)

        assert await generator.evaluate(_adjustment("P1", 11)) is None
        assert await generator.list_alerts() == []

    @pytest.mark.asyncio
    async def test_evaluate_persists_alert(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)

        alert = await generator.evaluate(_adjustment("P1", 3))

        assert alert is not None
        assert alert.severity == "high"
        assert alert.current_stock == 3
        assert alert.threshold == 10
        assert alert.product_name == "Product P1"
        assert alert.resolved is False

    @pytest.mark.asyncio
    async def test_new_alert_supersedes_open_one(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)

        first = await generator.evaluate(_adjustment("P1", 8))
        second = await generator.evaluate(_adjustment("P1", 0))
        other = await generator.evaluate(_adjustment("P2", 4))

        open_alerts = await generator.list_alerts(resolved=False)
        assert {alert.id for alert in open_alerts} == {second.id, other.id}

        closed = await generator.list_alerts(resolved=True)
        assert [alert.id for alert in closed] == [first.id]
        assert closed[0].resolution == "superseded"
        assert closed[0].resolved_at is not None

    @pytest.mark.asyncio
    async def test_resolve_alert(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)
        alert = await generator.evaluate(_adjustment("P1", 0))

        resolved = await generator.resolve_alert(alert.id)

        assert resolved.resolved is True
        assert resolved.resolution == "operator"
        assert await generator.list_alerts(resolved=False) == []

    @pytest.mark.asyncio
    async def test_resolve_is_idempotent(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)
        alert = await generator.evaluate(_adjustment("P1", 0))

        first = await generator.resolve_alert(alert.id)
        second = await generator.resolve_alert(alert.id)

        assert first.resolved_at == second.resolved_at

    @pytest.mark.asyncio
    async def test_resolve_unknown_alert(self, db_session, thresholds):
        generator = AlertGenerator(db_session, thresholds=thresholds)

        with pytest.raises(AlertNotFound):
            await generator.resolve_alert(999)
