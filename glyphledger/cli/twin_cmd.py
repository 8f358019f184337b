"""Digital twin commands: compare."""
import json
import sys

import click

from glyphledger.config import load_config_if_present
from glyphledger.core.constants import HEALTHY_TWIN_TYPES
from glyphledger.core.errors import ConfigError
from glyphledger.core.receipt import print_receipt
from glyphledger.core.schemas import check_receipt
from glyphledger.detect import AssetState, build_twin_receipt, compare_states

from .output import EXIT_DEGRADED, EXIT_ERROR, EXIT_OK, error_box, read_json, success_box


def _states(file: str) -> list[AssetState]:
    data = read_json(file)
    if not isinstance(data, list):
        raise click.BadParameter(f"{file}: expected a JSON array of states")
    try:
        return [AssetState.from_dict(d) for d in data]
    except (KeyError, TypeError, ValueError) as e:
        raise click.BadParameter(f"{file}: invalid state: {e}") from e


def _fields(pairs: tuple[str, ...]) -> dict:
    """KEY=VALUE pairs; values parse as JSON, falling back to plain strings."""
    fields = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--field")
        try:
            fields[key] = json.loads(raw)
        except json.JSONDecodeError:
            fields[key] = raw
    return fields


@click.group()
def twin():
    """Digital twin divergence detection."""
    pass


@twin.command()
@click.argument('real_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('twin_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--threshold', type=float, default=None,
              help='Max healthy divergence (default: [twin] max_divergence from slo.toml)')
@click.option('--healthy-type', type=click.Choice(HEALTHY_TWIN_TYPES), default="entanglement_prediction",
              help='Receipt type for a healthy comparison')
@click.option('--field', 'field_pairs', multiple=True, metavar='KEY=VALUE',
              help='Extra receipt field, e.g. --field satellite_id=sat-7 (repeatable)')
@click.option('--config-dir', type=click.Path(file_okay=False), default=None,
              help='Config directory (default: $GLYPH_CONFIG_DIR or ./config when present)')
def compare(real_file: str, twin_file: str, threshold: float | None, healthy_type: str,
            field_pairs: tuple[str, ...], config_dir: str | None):
    """Compare real and twin state sequences and emit the classification receipt.

    Exit status is 1 when the emitted receipt fails schema validation,
    e.g. orbital_telemetry without its --field values.
    """
    try:
        config = load_config_if_present(config_dir)
    except ConfigError as e:
        error_box("Twin Compare: CONFIG ERROR", str(e), "glyph twin compare --config-dir <dir>")
        sys.exit(EXIT_ERROR)

    threshold = config.max_divergence if threshold is None else threshold
    extra_fields = _fields(field_pairs)

    try:
        report = compare_states(_states(real_file), _states(twin_file), threshold, healthy_type)
    except ValueError as e:
        error_box("Twin Compare: FAILED", str(e))
        sys.exit(EXIT_ERROR)

    receipt = build_twin_receipt(report, config.tenant_id, extra_fields=extra_fields)
    print_receipt(receipt)

    ok, reason = check_receipt(receipt, config.producers)
    if not ok:
        error_box("Twin Compare: INVALID", reason, "glyph twin compare ... --field KEY=VALUE")
        sys.exit(EXIT_DEGRADED)

    success_box("Twin Compare: " + ("ANOMALY" if report.anomalous else "HEALTHY"), [
        ("Asset", report.asset_id),
        ("Worst", f"{report.divergence_percent:.4f}%"),
        ("Average", f"{report.average * 100.0:.4f}%"),
        ("Threshold", f"{threshold * 100.0:.4f}%"),
        ("Roots match", str(report.roots_match)),
        ("Type", report.receipt_type),
    ])
    sys.exit(EXIT_OK)
