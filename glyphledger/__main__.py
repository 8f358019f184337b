"""
Entry point for running glyphledger as a module.

Usage:
    python -m glyphledger [command] [options]

Example:
    python -m glyphledger compact --config-dir config
    python -m glyphledger anchor root receipts.jsonl
    python -m glyphledger twin compare real.json twin.json
"""

from glyphledger.cli.main import cli

if __name__ == "__main__":
    cli()
