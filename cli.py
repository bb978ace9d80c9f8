"""Command-line interface for the darkroom easel border calculator.

Usage:
    # Borders and blade readings for the saved settings, overriding a few
    python cli.py calculate --paper=8x10 --ratio=3:2 --min-border=0.5

    # Drawings
    python cli.py preview preview.png --blades
    python cli.py template template.pdf

    # Presets
    python cli.py share --name="My 6x7 setup"
    python cli.py load <code>

Settings persist between invocations in a JSON file (--state-file).
"""

import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click

from easelcalc.calculator import BorderCalculator
from easelcalc.compute import CalculationDispatcher, select_backend
from easelcalc.config import ASPECT_RATIOS, DEFAULT_STATE_FILE, PAPER_SIZES
from easelcalc.controller import BorderCalculatorController
from easelcalc.rendering import render_preview, render_template_pdf
from easelcalc.sharing import DEFAULT_BORDER_PRESETS, BorderPreset, decode_preset, encode_preset
from easelcalc.storage import JsonFileStore
from easelcalc.units import format_length
from easelcalc.validation import CalculationResult

# Configure root logger
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

UNITS = ["in", "mm", "cm"]


def settings_options(func: Callable) -> Callable:
    """Options shared by commands that calculate; unset options keep the saved value."""
    options = [
        click.option("--paper", help="Paper size (see 'presets')"),
        click.option("--ratio", help="Aspect ratio (see 'presets')"),
        click.option("--paper-width", help="Custom paper width (in)"),
        click.option("--paper-height", help="Custom paper height (in)"),
        click.option("--ratio-width", help="Custom ratio width"),
        click.option("--ratio-height", help="Custom ratio height"),
        click.option("--min-border", help="Minimum border (in)"),
        click.option("--h-offset", type=float, help="Horizontal offset (in), positive moves right"),
        click.option("--v-offset", type=float, help="Vertical offset (in), positive moves down"),
        click.option("--offset/--no-offset", "enable_offset", default=None, help="Apply offsets"),
        click.option("--ignore-min-border/--honour-min-border", default=None, help="Let offsets eat into min border"),
        click.option("--landscape/--portrait", "is_landscape", default=None, help="Paper orientation"),
        click.option("--flip-ratio/--no-flip-ratio", "is_ratio_flipped", default=None, help="Swap ratio sides"),
        click.option("--blades/--no-blades", "show_blades", default=None, help="Draw easel blades"),
        click.option("--blade-readings/--no-blade-readings", "show_blade_readings", default=None),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def apply_settings(controller: BorderCalculatorController, **values: Any) -> None:
    """Push command-line overrides into the controller in dependency order."""
    # Selectors first: changing them resets orientation flags
    if values.get("paper") is not None and not controller.set_paper_size(values["paper"]):
        raise click.ClickException(f"Unknown paper size: {values['paper']}")
    if values.get("ratio") is not None and not controller.set_aspect_ratio(values["ratio"]):
        raise click.ClickException(f"Unknown aspect ratio: {values['ratio']}")

    for option, setter in (
        ("paper_width", controller.set_custom_paper_width),
        ("paper_height", controller.set_custom_paper_height),
        ("ratio_width", controller.set_custom_aspect_width),
        ("ratio_height", controller.set_custom_aspect_height),
        ("min_border", controller.set_min_border),
    ):
        if values.get(option) is not None and not setter(values[option]):
            raise click.ClickException(f"--{option.replace('_', '-')} must be a number, got {values[option]!r}")

    toggles = ("enable_offset", "ignore_min_border", "is_landscape", "is_ratio_flipped", "show_blades", "show_blade_readings")
    for toggle in toggles:
        if values.get(toggle) is not None:
            controller.set_toggle(toggle, values[toggle])

    controller.set_offsets(values.get("h_offset"), values.get("v_offset"))


def echo_result(result: CalculationResult, unit: str) -> None:
    def fmt(value: float) -> str:
        return format_length(value, unit)

    click.echo(f"📄 Paper: {fmt(result.paper_width)} x {fmt(result.paper_height)}")
    if not result.has_valid_print:
        click.echo("❌ No valid print area for these settings")
    else:
        click.echo(f"🖼  Print: {fmt(result.print_width)} x {fmt(result.print_height)}")
        click.echo(
            f"   Borders: left {fmt(result.left_border)}, right {fmt(result.right_border)}, "
            f"top {fmt(result.top_border)}, bottom {fmt(result.bottom_border)}"
        )
    click.echo(
        f"📏 Blades: left {fmt(result.left_blade_reading)}, right {fmt(result.right_blade_reading)}, "
        f"top {fmt(result.top_blade_reading)}, bottom {fmt(result.bottom_blade_reading)}"
    )
    easel_note = " (non-standard paper, readings corrected for slot)" if result.is_non_standard_paper_size else ""
    click.echo(f"   Easel: {result.easel_size_label}{easel_note}")

    for warning in result.warnings().values():
        if warning:
            for line in warning.splitlines():
                click.echo(f"⚠ {line}", err=True)


@click.group()
@click.option("--state-file", default=DEFAULT_STATE_FILE, envvar="EASELCALC_STATE_FILE", help="Saved settings file")
@click.option("--backend", default="inline", type=click.Choice(["auto", "process", "inline"]), help="Where to calculate")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, state_file: str, backend: str, verbose: bool) -> None:
    """Darkroom easel border calculator."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    calculator = BorderCalculator()
    compute_backend = select_backend(backend, calculator)
    logger.info(f"Using '{compute_backend.name}' calculation backend")
    controller = BorderCalculatorController(
        store=JsonFileStore(state_file),
        dispatcher=CalculationDispatcher(compute_backend, calculator),
    )
    ctx.obj = controller
    # Pending writes are flushed whatever the command outcome
    ctx.call_on_close(controller.close)


@cli.command()
@settings_options
@click.option("--unit", default="in", type=click.Choice(UNITS), help="Display unit")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.pass_obj
def calculate(controller: BorderCalculatorController, unit: str, as_json: bool, **values: Any) -> None:
    """Calculate borders and blade readings."""
    apply_settings(controller, **values)
    result = controller.result

    if as_json:
        click.echo(json.dumps(result.model_dump(), indent=2))
        return
    echo_result(result, unit)


@cli.command()
@click.argument("output_path", type=click.Path(dir_okay=False))
@settings_options
@click.pass_obj
def preview(controller: BorderCalculatorController, output_path: str, **values: Any) -> None:
    """Render a preview PNG of paper and print area.

    Args:
        output_path: Where to write the PNG
    """
    apply_settings(controller, **values)
    result = controller.result

    width, height = render_preview(result, output_path, show_blades=controller.state.show_blades)
    click.echo(f"✓ Preview {width}x{height}px saved to: {output_path}")


@cli.command()
@click.argument("output_path", type=click.Path(dir_okay=False))
@settings_options
@click.pass_obj
def template(controller: BorderCalculatorController, output_path: str, **values: Any) -> None:
    """Render a true-scale PDF template of the print area.

    Args:
        output_path: Where to write the PDF
    """
    apply_settings(controller, **values)
    result = controller.result

    try:
        render_template_pdf(result, output_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"✓ Template saved to: {output_path}")


@cli.command()
@click.option("--name", default="Shared preset", help="Preset name")
@click.pass_obj
def share(controller: BorderCalculatorController, name: str) -> None:
    """Print a share code for the saved settings."""
    if not name:
        raise click.ClickException("Preset name cannot be empty")
    try:
        code = encode_preset(BorderPreset(name=name, settings=controller.shareable_settings()))
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    click.echo(code)


@cli.command()
@click.argument("code")
@click.option("--unit", default="in", type=click.Choice(UNITS), help="Display unit")
@click.pass_obj
def load(controller: BorderCalculatorController, code: str, unit: str) -> None:
    """Load settings from a share code."""
    preset = decode_preset(code)
    if preset is None:
        raise click.ClickException("Invalid preset code")
    result = controller.apply_preset(preset.settings)
    click.echo(f"✓ Loaded preset '{preset.name}'")
    echo_result(result, unit)


@cli.command()
def presets() -> None:
    """List paper sizes, aspect ratios and built-in presets."""
    click.echo("Paper sizes:")
    for paper in PAPER_SIZES:
        click.echo(f"  {paper['value']:<14} {paper['label']}")
    click.echo("Aspect ratios:")
    for ratio in ASPECT_RATIOS:
        click.echo(f"  {ratio['value']:<14} {ratio['label']}")
    click.echo("Built-in presets:")
    for preset in DEFAULT_BORDER_PRESETS:
        click.echo(f"  {preset.name}: {encode_preset(preset)}")


@cli.command()
@click.pass_obj
def suggest(controller: BorderCalculatorController) -> None:
    """Suggest minimum borders that land on quarter inches."""
    suggestions = controller.suggest_min_borders()
    click.echo(f"Even quarter-inch borders: min border {suggestions['optimal']:g}\"")
    if suggestions["quarter_inch"] is None:
        click.echo("Quarter-inch print size: already aligned or not reachable")
    else:
        click.echo(f"Quarter-inch print size: min border {suggestions['quarter_inch']:g}\"")


@cli.command()
@click.pass_obj
def reset(controller: BorderCalculatorController) -> None:
    """Restore default settings."""
    controller.reset()
    click.echo("✓ Settings reset to defaults")


if __name__ == "__main__":
    cli()
