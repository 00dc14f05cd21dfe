"""memora: SM-2 spaced-repetition engine for vocabulary study."""

from memora.consts import VERSION

__version__ = VERSION
