"""Fee computation tests"""
from decimal import Decimal

import pytest

from config.constants import ApplicationMethod, FEE_BREAKDOWN_COLUMNS
from core.exceptions import ConfigurationError
from core.fees import calc_fee, calc_fees, fees_to_frame
from loan_data.schema import FeeDefinition


def _fee(name, percent, method=ApplicationMethod.DEDUCT_FROM_DISBURSAL):
    return FeeDefinition(name=name, percent=percent, application_method=method)


class TestCalcFee:
    def test_processing_fee_with_gst(self, processing_fee):
        line = calc_fee(Decimal(10000), processing_fee)
        assert line.amount == Decimal(1000)
        assert line.gst == Decimal(180)
        assert line.total_with_gst == Decimal(1180)

    def test_rounds_half_up_to_currency_unit(self):
        # 999 x 2.5% = 24.975 -> 25; GST 25 x 18% = 4.5 -> 5
        line = calc_fee(Decimal(999), _fee("Platform fee", "2.5"))
        assert line.amount == Decimal(25)
        assert line.gst == Decimal(5)


class TestCalcFees:
    def test_partitions_by_application_method(self):
        fees = [
            _fee("Processing fee", 10),
            _fee("Convenience fee", 2, ApplicationMethod.ADD_TO_TOTAL),
            _fee("Documentation fee", 1),
        ]
        breakdown = calc_fees(Decimal(10000), fees)

        deduct = breakdown.deduct_from_disbursal
        assert [line.name for line in deduct.lines] == ["Processing fee", "Documentation fee"]
        assert deduct.fee_sum == Decimal(1100)
        assert deduct.gst_sum == Decimal(198)

        add = breakdown.add_to_total
        assert [line.name for line in add.lines] == ["Convenience fee"]
        assert add.fee_sum == Decimal(200)
        assert add.gst_sum == Decimal(36)
        assert add.total == Decimal(236)

    def test_sums_are_sums_of_rounded_lines(self):
        """Each line is rounded on its own, not the aggregate"""
        fees = [_fee("A", "2.5"), _fee("B", "2.5")]
        bucket = calc_fees(Decimal(999), fees).deduct_from_disbursal
        assert bucket.fee_sum == Decimal(50)
        # one rounding of 49.95 x 18% would give 9
        assert bucket.gst_sum == Decimal(10)

    def test_no_fees(self):
        breakdown = calc_fees(Decimal(5000), [])
        assert breakdown.deduct_from_disbursal.total == 0
        assert breakdown.add_to_total.total == 0
        assert breakdown.lines == []

    def test_unknown_application_method(self):
        with pytest.raises(ConfigurationError):
            _fee("Mystery fee", 5, "deduct_later")

    def test_frame(self):
        breakdown = calc_fees(Decimal(10000), [_fee("Processing fee", 10)])
        df = fees_to_frame(breakdown)
        assert list(df.columns) == FEE_BREAKDOWN_COLUMNS
        assert df.iloc[0]["total_with_gst"] == 1180.0
        assert df.iloc[0]["application_method"] == "deduct_from_disbursal"
