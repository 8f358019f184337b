"""Receipt commands: stamp, validate."""
import sys

import click

from glyphledger.config import load_config_if_present
from glyphledger.core.errors import ConfigError
from glyphledger.core.receipt import print_receipt, stamp_receipt
from glyphledger.core.schemas import check_receipt
from glyphledger.ledger import check_integrity

from .output import EXIT_DEGRADED, EXIT_ERROR, EXIT_OK, error_box, read_json, read_jsonl, success_box


@click.group()
def receipt():
    """Receipt stamping and validation."""
    pass


@receipt.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--tenant', default=None, help='Set tenant_id before stamping')
def stamp(file: str, tenant: str | None):
    """Stamp content_hash, signature and receipt_id onto a receipt JSON file."""
    data = read_json(file)
    if not isinstance(data, dict):
        error_box("Receipt Stamp: FAILED", "receipt file must hold a JSON object")
        sys.exit(EXIT_ERROR)
    if tenant:
        data = {**data, "tenant_id": tenant}

    try:
        stamped = stamp_receipt(data)
    except ValueError as e:
        error_box("Receipt Stamp: FAILED", str(e))
        sys.exit(EXIT_ERROR)

    print_receipt(stamped)
    ok, reason = check_receipt(stamped)
    if not ok:
        error_box("Receipt Stamp: INVALID", reason)
        sys.exit(EXIT_DEGRADED)
    sys.exit(EXIT_OK)


@receipt.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--config-dir', type=click.Path(file_okay=False), default=None,
              help='Config directory for producer names (default: $GLYPH_CONFIG_DIR or ./config when present)')
def validate(file: str, config_dir: str | None):
    """Validate every receipt in a JSONL file (schema, hash, signature)."""
    try:
        config = load_config_if_present(config_dir)
    except ConfigError as e:
        error_box("Receipt Validate: CONFIG ERROR", str(e))
        sys.exit(EXIT_ERROR)

    receipts = read_jsonl(file)
    rejected = 0
    for lineno, r in enumerate(receipts, start=1):
        ok, reason = check_integrity(r, config)
        if not ok:
            rejected += 1
            click.echo(f"line {lineno}: {reason}", err=True)

    success_box("Receipt Validate", [
        ("File", file),
        ("Receipts", str(len(receipts))),
        ("Accepted", str(len(receipts) - rejected)),
        ("Rejected", str(rejected)),
    ], "glyph anchor root " + file if not rejected else None)
    sys.exit(EXIT_DEGRADED if rejected else EXIT_OK)
