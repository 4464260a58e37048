"""
Deterministic conversion rules.

This file exists to make defaults and heuristic thresholds explicit and enforceable.
"""

DEFAULT_OUTPUT_ENCODING = "UTF-8"
DEFAULT_REPLACEMENT = "?"

# Single-byte page assumed when detection is inconclusive (superset of Latin-1).
DETECTION_FALLBACK = "Windows-1252"

# Mojibake correction
MAX_CORRECTION_PASSES = 5
MEANINGFUL_RATIO = 0.8
OVERCORRECTION_RATIO = 0.1

# Header stamping
PROGRAM_ID = "TransADIF"
ENCODING_FIELD = "ENCODING"
PROGRAMID_FIELD = "PROGRAMID"

# Accepted upload suffixes for the HTTP API
ADIF_SUFFIXES = (".adi", ".adif")
