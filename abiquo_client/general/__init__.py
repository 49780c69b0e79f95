"""
abiquo_client.general - Version-independent helpers
====================================================
"""

from abiquo_client.general.builders import FilterBuilder, HeaderBuilder
from abiquo_client.general.serialization import (
    DictionaryParameters,
    decode,
    decode_dictionary,
    encode,
)

__all__ = [
    "FilterBuilder",
    "HeaderBuilder",
    "DictionaryParameters",
    "decode",
    "decode_dictionary",
    "encode",
]
