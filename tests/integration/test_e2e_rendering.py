"""Integration tests for preview and template rendering."""

from pathlib import Path

import fitz  # type: ignore[import-untyped]  # PyMuPDF
import pytest
from PIL import Image

from easelcalc.calculator import BorderCalculator
from easelcalc.rendering import BLADE_COLOR, PAPER_COLOR, PRINT_COLOR, render_preview, render_template_pdf
from easelcalc.validation import CalculatorSettings


@pytest.fixture
def calculator() -> BorderCalculator:
    return BorderCalculator()


class TestRenderPreview:
    """Tests for the PNG preview."""

    def test_preview_size_and_regions(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        """
        Default 8x10 landscape at 40 px/in: 400x320 image with the print
        from (20, 40) to (380, 280).
        """
        result = calculator.compute(CalculatorSettings())
        output = tmp_path / "preview.png"
        size = render_preview(result, str(output))
        assert size == (400, 320)

        with Image.open(output) as img:
            assert img.size == (400, 320)
            rgb = img.convert("RGB")
            assert rgb.getpixel((200, 160)) == PRINT_COLOR
            assert rgb.getpixel((10, 160)) == PAPER_COLOR
            assert rgb.getpixel((200, 20)) == PAPER_COLOR

    def test_preview_with_blades(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        """Test blades are drawn in the border just outside the print."""
        result = calculator.compute(CalculatorSettings())
        output = tmp_path / "blades.png"
        render_preview(result, str(output), show_blades=True)

        with Image.open(output) as img:
            rgb = img.convert("RGB")
            assert rgb.getpixel((19, 160)) == BLADE_COLOR
            assert rgb.getpixel((200, 39)) == BLADE_COLOR
            assert rgb.getpixel((200, 160)) == PRINT_COLOR

    def test_preview_zero_border_with_blades(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        """Test a print pushed against the paper edge still renders."""
        settings = CalculatorSettings(
            enable_offset=True, ignore_min_border=True, horizontal_offset=5, vertical_offset=5, show_blades=True
        )
        result = calculator.compute(settings)
        assert result.right_border == pytest.approx(0)
        render_preview(result, str(tmp_path / "edge.png"), show_blades=True)
        assert (tmp_path / "edge.png").exists()

    def test_preview_without_print(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        settings = CalculatorSettings(paper_size="custom", custom_paper_width=0, custom_paper_height=10)
        result = calculator.compute(settings)
        assert result.has_valid_print is False
        output = tmp_path / "sub" / "empty.png"
        render_preview(result, str(output))
        assert output.exists()


class TestRenderTemplatePdf:
    """Tests for the true-scale PDF template."""

    def test_page_is_paper_size(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        """Test 10x8in landscape paper gives a 720x576pt page."""
        result = calculator.compute(CalculatorSettings())
        output = tmp_path / "template.pdf"
        render_template_pdf(result, str(output))

        assert output.exists(), "PDF was not created"
        doc = fitz.open(str(output))
        assert len(doc) == 1
        page = doc[0]
        assert page.rect.width == pytest.approx(720, abs=0.5)
        assert page.rect.height == pytest.approx(576, abs=0.5)
        doc.close()

    def test_print_rectangle_position(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        """Test the print rectangle sits at the border offsets (PyMuPDF uses top-left origin)."""
        settings = CalculatorSettings(enable_offset=True, vertical_offset=0.5)
        result = calculator.compute(settings)
        output = tmp_path / "offset.pdf"
        render_template_pdf(result, str(output))

        doc = fitz.open(str(output))
        page = doc[0]
        rects = [item["rect"] for item in page.get_drawings() if item["rect"].width > 100]
        assert rects, "No print rectangle drawn"
        rect = rects[0]
        assert rect.x0 == pytest.approx(result.left_border * 72, abs=1)
        assert rect.y0 == pytest.approx(result.top_border * 72, abs=1)
        assert rect.width == pytest.approx(result.print_width * 72, abs=1)
        assert rect.height == pytest.approx(result.print_height * 72, abs=1)
        doc.close()

    def test_caption_text(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        result = calculator.compute(CalculatorSettings())
        output = tmp_path / "caption.pdf"
        render_template_pdf(result, str(output))

        doc = fitz.open(str(output))
        text = doc[0].get_text()
        assert "Borders" in text
        assert "Easel 8x10" in text
        doc.close()

    def test_print_against_paper_edge(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        settings = CalculatorSettings(enable_offset=True, ignore_min_border=True, horizontal_offset=-5)
        result = calculator.compute(settings)
        assert result.left_border == pytest.approx(0)
        render_template_pdf(result, str(tmp_path / "edge.pdf"))
        assert (tmp_path / "edge.pdf").exists()

    def test_no_valid_print_raises(self, calculator: BorderCalculator, tmp_path: Path) -> None:
        settings = CalculatorSettings(paper_size="custom", custom_paper_width=0, custom_paper_height=10)
        result = calculator.compute(settings)
        with pytest.raises(ValueError, match="valid print area"):
            render_template_pdf(result, str(tmp_path / "none.pdf"))
