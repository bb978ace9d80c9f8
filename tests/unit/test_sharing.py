"""Unit tests for easelcalc/sharing.py."""

import base64

import pytest

from easelcalc.controller import BorderCalculatorController
from easelcalc.sharing import (
    DEFAULT_BORDER_PRESETS,
    BorderPreset,
    decode_preset,
    encode_preset,
    is_valid_encoded_preset,
)
from easelcalc.validation import CalculatorSettings


def raw_fields(code: str) -> str:
    return base64.urlsafe_b64decode(code + "=" * (-len(code) % 4)).decode("ascii")


class TestEncodePreset:
    """Tests for share code layout."""

    def test_default_layout(self) -> None:
        """Test field order, offset bias and flag bitmask."""
        preset = BorderPreset(name="Test", settings=CalculatorSettings())
        assert raw_fields(encode_preset(preset)) == "Test-0-2-50-10000-10000-8"

    def test_url_safe_without_padding(self) -> None:
        code = encode_preset(DEFAULT_BORDER_PRESETS[0])
        assert "=" not in code
        assert "+" not in code
        assert "/" not in code

    def test_name_dash_is_escaped(self) -> None:
        """Test a dash in the name cannot be confused with the field separator."""
        preset = BorderPreset(name="6x7 - wide", settings=CalculatorSettings())
        assert raw_fields(encode_preset(preset)).startswith("6x7%20%2D%20wide-")

    def test_flags_and_offsets(self) -> None:
        settings = CalculatorSettings(
            enable_offset=True,
            ignore_min_border=True,
            show_blades=True,
            is_landscape=False,
            is_ratio_flipped=True,
            show_blade_readings=True,
            horizontal_offset=-0.5,
            vertical_offset=1.25,
        )
        fields = raw_fields(encode_preset(BorderPreset(name="x", settings=settings))).split("-")
        assert fields[4] == "9950"
        assert fields[5] == "10125"
        assert fields[6] == str(1 | 2 | 4 | 16 | 32)

    def test_custom_values_appended(self) -> None:
        settings = CalculatorSettings(
            aspect_ratio="custom",
            paper_size="custom",
            custom_aspect_width=1.5,
            custom_aspect_height=1,
            custom_paper_width=9.5,
            custom_paper_height=12,
        )
        fields = raw_fields(encode_preset(BorderPreset(name="x", settings=settings))).split("-")
        assert fields[7:] == ["150", "100", "950", "1200"]


class TestDecodePreset:
    """Tests for share code decoding."""

    def test_round_trip_with_custom_values(self) -> None:
        settings = CalculatorSettings(
            aspect_ratio="custom",
            paper_size="custom",
            custom_aspect_width=1.5,
            custom_aspect_height=1,
            custom_paper_width=9.5,
            custom_paper_height=12,
            min_border=0.75,
            enable_offset=True,
            horizontal_offset=-0.25,
            vertical_offset=0.5,
            is_landscape=False,
        )
        preset = BorderPreset(name="My 6x9 - 9.5x12 / test", settings=settings)
        decoded = decode_preset(encode_preset(preset))
        assert decoded == preset

    def test_default_preset(self) -> None:
        decoded = decode_preset(encode_preset(DEFAULT_BORDER_PRESETS[0]))
        assert decoded is not None
        assert decoded.name == "35mm on 8x10, 6x9in"
        assert decoded.settings.paper_size == "8x10"
        assert decoded.settings.aspect_ratio == "3:2"

    @pytest.mark.parametrize(
        "code",
        [
            "",
            "!!!",
            base64.urlsafe_b64encode(b"x-0-2").decode().rstrip("="),
            base64.urlsafe_b64encode(b"x-99-2-50-10000-10000-8").decode().rstrip("="),
            base64.urlsafe_b64encode(b"x--1-2-50-10000-10000-8").decode().rstrip("="),
            base64.urlsafe_b64encode(b"x-0-6-50-10000-10000-8").decode().rstrip("="),
            base64.urlsafe_b64encode(b"-0-2-50-10000-10000-8").decode().rstrip("="),
        ],
    )
    def test_invalid_returns_none(self, code: str) -> None:
        """Test malformed codes decode to None rather than raising."""
        assert decode_preset(code) is None


class TestIsValidEncodedPreset:
    def test_valid(self) -> None:
        assert is_valid_encoded_preset(encode_preset(DEFAULT_BORDER_PRESETS[0]))

    def test_bad_characters(self) -> None:
        assert not is_valid_encoded_preset("abc$def")

    def test_empty(self) -> None:
        assert not is_valid_encoded_preset("")


class TestNegativeValues:
    """Tests for values the field separator cannot carry."""

    def test_negative_min_border_rejected(self) -> None:
        preset = BorderPreset(name="x", settings=CalculatorSettings(min_border=-1))
        with pytest.raises(ValueError, match="negative"):
            encode_preset(preset)

    def test_controller_shares_border_in_use(self) -> None:
        """Test a rejected negative border is shared as the border actually used."""
        controller = BorderCalculatorController()
        controller.set_min_border("0.75")
        controller.set_min_border("-1")
        assert controller.state.min_border == -1

        code = encode_preset(BorderPreset(name="neg", settings=controller.shareable_settings()))
        decoded = decode_preset(code)
        assert decoded is not None
        assert decoded.settings.min_border == 0.75
