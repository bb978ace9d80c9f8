"""Unit tests for easelcalc/units.py."""

import math

import pytest

from easelcalc.units import (
    format_length,
    inches_to_mm,
    inches_to_pdf_coords,
    inches_to_points,
    is_quarter_increment,
    mm_to_inches,
    round_to_precision,
    round_to_standard_precision,
)


class TestLengthConversions:
    """Tests for inch/mm/point conversions."""

    def test_inches_to_mm(self) -> None:
        """Test one inch is 25.4 mm."""
        assert inches_to_mm(1) == pytest.approx(25.4)

    def test_mm_to_inches(self) -> None:
        """Test 254 mm is ten inches."""
        assert mm_to_inches(254) == pytest.approx(10)

    def test_inches_to_points(self) -> None:
        """Test 8 inches is 576 points."""
        assert inches_to_points(8) == pytest.approx(576)

    def test_zero(self) -> None:
        """Test zero converts to zero."""
        assert inches_to_mm(0) == 0.0
        assert inches_to_points(0) == 0.0


class TestCoordinateTransforms:
    """Tests for top-left inches to bottom-left points."""

    def test_flip_y(self) -> None:
        """Test Y-axis flip for ReportLab coordinate system."""
        x_pt, y_pt = inches_to_pdf_coords(1, 2, 10)
        assert x_pt == pytest.approx(72)
        assert y_pt == pytest.approx(8 * 72)

    def test_top_left_corner(self) -> None:
        """Test top-left corner maps to the top of the page in points."""
        x_pt, y_pt = inches_to_pdf_coords(0, 0, 10)
        assert x_pt == 0
        assert y_pt == pytest.approx(720)

    def test_bottom_left_corner(self) -> None:
        """Test bottom-left corner maps to the PDF origin."""
        x_pt, y_pt = inches_to_pdf_coords(0, 10, 10)
        assert x_pt == 0
        assert y_pt == pytest.approx(0)


class TestRounding:
    """Tests for precision helpers."""

    def test_round_to_precision_default(self) -> None:
        assert round_to_precision(1.23456) == 1.23

    def test_round_to_precision_places(self) -> None:
        assert round_to_precision(1.23456, 3) == 1.235

    def test_round_to_standard_precision(self) -> None:
        assert round_to_standard_precision(0.666666) == 0.67


class TestQuarterIncrement:
    """Tests for the quarter-inch grid check."""

    @pytest.mark.parametrize("value", [0, 0.25, 0.5, 6.75, 9.0])
    def test_on_grid(self, value: float) -> None:
        """Test values on the quarter-inch grid."""
        assert is_quarter_increment(value)

    @pytest.mark.parametrize("value", [0.1, 4.6667, 6.3])
    def test_off_grid(self, value: float) -> None:
        """Test values off the grid."""
        assert not is_quarter_increment(value)

    def test_within_tolerance(self) -> None:
        """Test tiny float error still counts as on grid."""
        assert is_quarter_increment(0.25 + 1e-6)

    def test_non_finite(self) -> None:
        """Test NaN and infinity are never on grid."""
        assert not is_quarter_increment(math.nan)
        assert not is_quarter_increment(math.inf)


class TestFormatLength:
    """Tests for display formatting."""

    def test_inches(self) -> None:
        assert format_length(1.25) == '1.25"'

    def test_inches_trims_noise(self) -> None:
        assert format_length(4.666666) == '4.667"'

    def test_millimeters(self) -> None:
        assert format_length(1, "mm") == "25.4 mm"

    def test_centimeters(self) -> None:
        assert format_length(1, "cm") == "2.54 cm"

    def test_unknown_unit_raises(self) -> None:
        """Test unsupported unit raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported unit"):
            format_length(1, "ft")
