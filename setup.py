"""glyphledger setup - tamper-evident receipt ledger."""
from setuptools import setup, find_packages

setup(
    name="glyphledger",
    version="1.0.0",
    description="glyphledger: tamper-evident receipts, Merkle anchors and gated compaction",
    packages=find_packages(include=["glyphledger", "glyphledger.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0",
        "blake3>=0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "glyph=glyphledger.cli.main:cli",
        ],
    },
)
