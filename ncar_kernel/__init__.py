"""
NCAR Kernel - finding lifecycle core

An in-process corrective-action tracking core with:
- Role-gated lifecycle state machines for findings and audit plans
- Typed, coded exceptions
- Structured JSON logging
- Injectable clock for deterministic turnaround-time calculations
"""

__version__ = "0.1.0"
