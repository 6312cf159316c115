"""Concolic naming protocol constants.

Single source of truth for identifier layout, kind tags and value widths.
Keep this file stable. The marking side and the assignment decoder must
remain synchronized.
"""
import struct
import sys

# Identifier layout: "<base>.<tag>#<qualifier>"
PATH_SEP = "."
TAG_SEP = "#"

QUALIFIER_VALUE = "value"
QUALIFIER_SIZE = "size"

# The engine copies names into a 256-byte scratch buffer (incl. NUL)
MAX_IDENTIFIER_LEN = 255

# Fixed-width integer: 4 bytes, native byte order
INT_FMT = "=i"
INT_LEN = struct.calcsize(INT_FMT)
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

# Platform size integer (Py_ssize_t): pointer width, native layout
SSIZE_FMT = "n"
SSIZE_LEN = struct.calcsize(SSIZE_FMT)

# Unicode strings travel as UCS-4 code units
UNICODE_UNIT_WIDTH = 4
UNICODE_UNIT_FMT = "I"  # with "=": 4 bytes, native byte order
MAX_CODE_POINT = 0x10FFFF
UNICODE_CODEC = "utf-32-le" if sys.byteorder == "little" else "utf-32-be"
UNICODE_ERRORS = "surrogatepass"

# Session-wide bound on symbolic container sizes
DEFAULT_MAX_SYMBOLIC_SIZE = 1024

# Size bounds sentinel: negative max means "fixed size, do not track"
SIZE_UNTRACKED = -1
