"""Anchor commands: root, prove, verify."""
import sys

import click

from glyphledger.anchor import build_proof, build_root, proof_from_json, proof_to_json, proves_inclusion
from glyphledger.core.errors import ProofError

from .output import EXIT_DEGRADED, EXIT_ERROR, EXIT_OK, error_box, print_json, read_json, read_jsonl, success_box


def _leaves(file: str) -> list[str]:
    """content_hash of every receipt in a JSONL file, in file order."""
    leaves = []
    for lineno, r in enumerate(read_jsonl(file), start=1):
        if not isinstance(r, dict) or "content_hash" not in r:
            raise ProofError(f"line {lineno}: receipt has no content_hash")
        leaves.append(r["content_hash"])
    return leaves


@click.group()
def anchor():
    """Merkle anchoring and SPV inclusion proofs."""
    pass


@anchor.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def root(file: str):
    """Compute the Merkle root over the receipts in a JSONL file."""
    try:
        leaves = _leaves(file)
        merkle_root = build_root(leaves)
    except ProofError as e:
        error_box("Anchor Root: FAILED", str(e))
        sys.exit(EXIT_ERROR)

    print_json({"merkle_root": merkle_root, "batch_size": len(leaves)})
    success_box("Anchor Root", [
        ("File", file),
        ("Leaves", str(len(leaves))),
        ("Root", merkle_root[:32]),
    ], f"glyph anchor prove {file} --index 0")
    sys.exit(EXIT_OK)


@anchor.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--index', 'index', type=int, required=True, help='Leaf index to prove')
def prove(file: str, index: int):
    """Emit the inclusion proof for one receipt of a JSONL file."""
    try:
        leaves = _leaves(file)
        merkle_root, proof = build_proof(leaves, index)
    except ProofError as e:
        error_box("Anchor Prove: FAILED", str(e))
        sys.exit(EXIT_ERROR)

    print_json({
        "merkle_root": merkle_root,
        "leaf": leaves[index],
        "index": index,
        "proof_path": proof_to_json(proof),
    })
    sys.exit(EXIT_OK)


@anchor.command()
@click.option('--leaf', required=True, help='Leaf content_hash (64 hex)')
@click.option('--proof', 'proof_file', type=click.Path(exists=True, dir_okay=False), required=True,
              help='JSON proof: a proof_path array or an object holding one')
@click.option('--root', 'expected_root', required=True, help='Expected Merkle root (64 hex)')
def verify(leaf: str, proof_file: str, expected_root: str):
    """Verify a leaf's inclusion proof against a root."""
    data = read_json(proof_file)
    if isinstance(data, dict):
        data = data.get("proof_path")
    try:
        included = proves_inclusion(leaf, proof_from_json(data), expected_root)
    except ProofError as e:
        error_box("Anchor Verify: ERROR", str(e))
        sys.exit(EXIT_ERROR)

    if not included:
        error_box("Anchor Verify: INVALID", f"leaf {leaf[:16]} not included under {expected_root[:16]}")
        sys.exit(EXIT_DEGRADED)

    success_box("Anchor Verify: VALID", [
        ("Leaf", leaf[:32]),
        ("Root", expected_root[:32]),
    ])
    sys.exit(EXIT_OK)
