"""
Insurance Kernel

An in-process insurance company model with:
- Contract issuance under underwriting rules
- Master contracts bundling single-vehicle contracts
- Catch-up premium billing driven by a caller-supplied logical clock
- Travel and vehicle claim settlement
"""

__version__ = "0.1.0"
