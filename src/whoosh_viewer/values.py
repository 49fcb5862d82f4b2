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
Typed values for terms and reconstructed field contents.
"""

from collections import namedtuple
from enum import IntEnum


class ValueType(IntEnum):
    """The value type of a field, as far as the viewer can decode it.

    ``OPAQUE`` covers every Whoosh field type whose terms are not plain
    integers, text or bytes (floats, dates, booleans, stored-only fields).
    """

    I64 = 0
    U64 = 1
    TEXT = 2
    BYTES = 3
    OPAQUE = 4


class TermValue(namedtuple("TermValue", "type value")):
    """A typed term value: signed or unsigned integer, text, or bytes.

    Values compare by type first and then by the contained value, so a list of
    values from a single field sorts in natural order.

    >>> TermValue.text("alfa")
    TermValue(type=<ValueType.TEXT: 2>, value='alfa')
    >>> str(TermValue.bytes(b"abc"))
    '[3 bytes]'
    """

    __slots__ = ()

    @classmethod
    def i64(cls, value):
        return cls(ValueType.I64, int(value))

    @classmethod
    def u64(cls, value):
        return cls(ValueType.U64, int(value))

    @classmethod
    def text(cls, value):
        return cls(ValueType.TEXT, str(value))

    @classmethod
    def bytes(cls, value):
        return cls(ValueType.BYTES, bytes(value))

    @classmethod
    def of(cls, value_type, value):
        """Builds a value of the given type from a Python object."""

        if value_type == ValueType.I64:
            return cls.i64(value)
        elif value_type == ValueType.U64:
            return cls.u64(value)
        elif value_type == ValueType.TEXT:
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            return cls.text(value)
        elif value_type == ValueType.BYTES:
            return cls.bytes(value)
        raise TypeError(f"No term value for type {value_type!r}")

    def __str__(self):
        if self.type == ValueType.BYTES:
            return f"[{len(self.value)} bytes]"
        return str(self.value)


def stringify_values(values):
    """Joins the values of a reconstructed document into display text.

    Each present value is followed by a single space; gaps (``None``) produce
    nothing.

    >>> stringify_values([TermValue.text("a"), None, TermValue.text("c")])
    'a c '
    """

    return "".join(f"{v} " for v in values if v is not None)
