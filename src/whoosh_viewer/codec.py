# Copyright 2011 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
Conversion between typed term values and the byte keys stored in a field's
term dictionary.

Text terms are stored as raw UTF-8. Integer terms use Whoosh's numeric
encoding: a "shift" byte followed by the fixed-width big-endian value, with the
sign bit flipped for signed fields, so that comparing keys byte by byte gives
the same order as comparing the numbers. Whoosh also indexes lower-precision
copies of each number (shift byte greater than zero) to speed up range
queries; only keys with a zero shift byte hold a full value.
"""

import re

from whoosh_viewer.errors import InvalidTermValue, Unimplemented, UnsupportedFieldAccess
from whoosh_viewer.values import TermValue, ValueType

FULL_PRECISION = b"\x00"

# Optional sign and ASCII digits only
_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)


class TypedTermCodec:
    """
    Encodes and decodes the terms of one field.

    Usage:
        codec = TypedTermCodec(snapshot.field("price"))
        key = codec.key_for_text("42")
        value = codec.decode(key)  # TermValue(type=I64, value=42)
    """

    def __init__(self, info):
        self.info = info
        self.value_type = info.value_type

    def __repr__(self):
        return f"{self.__class__.__name__}({self.info.name!r}, {self.value_type.name})"

    @property
    def numeric(self):
        return self.value_type in (ValueType.I64, ValueType.U64)

    def is_full_precision(self, key):
        """Returns False if the key is one of Whoosh's lower-precision copies of
        a numeric term.
        """

        if self.numeric:
            return key[:1] == FULL_PRECISION
        return True

    def decode(self, key):
        """Converts a term dictionary key into a :class:`TermValue`.

        :param key: The term bytes from the dictionary.
        :raises InvalidTermValue: if a text key is not valid UTF-8.
        :raises Unimplemented: if the field type cannot be decoded.
        """

        vt = self.value_type
        if vt == ValueType.TEXT:
            try:
                return TermValue.text(key.decode("utf-8"))
            except UnicodeDecodeError:
                raise InvalidTermValue(self.info.name, key, "not valid UTF-8") from None
        elif self.numeric:
            self._check_indexed()
            return TermValue(vt, int(self.info.fieldobj.from_bytes(key)))
        elif vt == ValueType.BYTES:
            return TermValue.bytes(key)
        raise Unimplemented(self.info.name, f"Decoding {vt.name} terms")

    def encode(self, value):
        """Converts a :class:`TermValue` into the key it is stored under."""

        vt = self.value_type
        if value.type != vt:
            raise InvalidTermValue(
                self.info.name, value.value, f"expected a {vt.name} value"
            )
        if vt == ValueType.TEXT:
            return value.value.encode("utf-8")
        elif self.numeric:
            self._check_indexed()
            self._check_range(value.value, value.value)
            return self.info.fieldobj.to_bytes(value.value)
        elif vt == ValueType.BYTES:
            return value.value
        raise Unimplemented(self.info.name, f"Encoding {vt.name} terms")

    def parse(self, text):
        """Parses caller-supplied text into a :class:`TermValue` of the field's
        type. Text is taken literally; it is not run through the field's
        analyzer.

        :raises InvalidTermValue: if the text is not a valid value.
        :raises Unimplemented: for bytes and opaque fields.
        """

        vt = self.value_type
        if vt == ValueType.TEXT:
            return TermValue.text(text)
        elif self.numeric:
            if not _INTEGER.fullmatch(text):
                raise InvalidTermValue(
                    self.info.name, text, f"invalid {vt.name.lower()} value"
                )
            number = int(text)
            self._check_range(number, text)
            return TermValue(vt, number)
        raise Unimplemented(self.info.name, f"Parsing {vt.name} terms")

    def key_for_text(self, text):
        """Shortcut for ``encode(parse(text))``."""
        return self.encode(self.parse(text))

    def _check_indexed(self):
        if not self.info.indexed:
            raise UnsupportedFieldAccess(self.info.name, "term")

    def _check_range(self, number, text):
        bits = getattr(self.info.fieldobj, "bits", 64)
        if self.value_type == ValueType.I64:
            lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            lo, hi = 0, (1 << bits) - 1
        if not lo <= number <= hi:
            raise InvalidTermValue(
                self.info.name,
                text,
                f"out of range for {bits}-bit {self.value_type.name}",
            )
