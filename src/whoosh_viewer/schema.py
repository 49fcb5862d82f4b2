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
Describes how a Whoosh field is stored, so the rest of the viewer can pick a
strategy without probing field classes everywhere.
"""

from enum import Enum

from whoosh import columns, fields

from whoosh_viewer.errors import FieldNotFound
from whoosh_viewer.values import ValueType


class FastCardinality(Enum):
    SINGLE = "single"
    MULTI = "multi"


# Integer struct typecodes accepted by NumericColumn
_SIGNED_CODES = "bhilq"
_UNSIGNED_CODES = "BHILQ"

_BYTES_COLUMNS = (
    columns.VarBytesColumn,
    columns.FixedBytesColumn,
    columns.RefBytesColumn,
    columns.CompressedBytesColumn,
)


class FieldInfo:
    """
    The storage modes and value type of one schema field.

    Attributes:
        name (str): The field name.
        fieldobj (whoosh.fields.FieldType): The Whoosh field object.
        value_type (ValueType): The type terms and values decode to.
        indexed (bool): True if the field has postings.
        has_freqs (bool): True if postings record per-document frequencies.
        has_positions (bool): True if postings record token positions.
        fast (FastCardinality or None): The column cardinality, or None if the
            field has no column.
        stored (bool): True if the field value is stored with the document.
    """

    def __init__(self, name, fieldobj):
        self.name = name
        self.fieldobj = fieldobj

        fmt = getattr(fieldobj, "format", None)
        self.indexed = bool(getattr(fieldobj, "indexed", False)) and fmt is not None
        self.has_positions = self.indexed and fmt.supports("positions")
        self.has_freqs = self.indexed and fmt.supports("frequency")
        self.stored = bool(getattr(fieldobj, "stored", False))

        column = getattr(fieldobj, "column_type", None)
        self.column = column or None
        if not self.column:
            self.fast = None
        elif isinstance(column, (columns.ListColumn, columns.PickleColumn)):
            self.fast = FastCardinality.MULTI
        else:
            self.fast = FastCardinality.SINGLE

        self.value_type = _value_type(fieldobj, self.column, self.indexed)

    def __repr__(self):
        modes = []
        if self.indexed:
            modes.append("positions" if self.has_positions else "indexed")
        if self.fast:
            modes.append(f"fast-{self.fast.value}")
        if self.stored:
            modes.append("stored")
        return (
            f"<{self.__class__.__name__} {self.name!r} "
            f"{self.value_type.name} {'+'.join(modes) or 'none'}>"
        )

    @property
    def positional(self):
        """True if documents are reconstructed from postings."""
        return self.indexed

    @property
    def columnar(self):
        """True if documents are reconstructed from the column."""
        return not self.indexed and self.fast is not None


def _value_type(fieldobj, column, indexed):
    if isinstance(fieldobj, (fields.DATETIME, fields.BOOLEAN)):
        return ValueType.OPAQUE

    if isinstance(fieldobj, fields.NUMERIC):
        if fieldobj.numtype is not int or getattr(fieldobj, "decimal_places", 0):
            return ValueType.OPAQUE
        return ValueType.I64 if fieldobj.signed else ValueType.U64

    if isinstance(fieldobj, fields.COLUMN):
        if isinstance(column, columns.NumericColumn):
            # NumericColumn has no public accessor for its struct typecode
            typecode = column._typecode
            if typecode in _SIGNED_CODES:
                return ValueType.I64
            elif typecode in _UNSIGNED_CODES:
                return ValueType.U64
            return ValueType.OPAQUE
        elif isinstance(column, columns.PickleColumn):
            # Usually lists of ints; other payloads are typed per value when read
            return ValueType.I64
        elif isinstance(column, (columns.ListColumn,) + _BYTES_COLUMNS):
            return ValueType.BYTES
        return ValueType.OPAQUE

    if indexed:
        return ValueType.TEXT
    return ValueType.OPAQUE


def field_info(schema, fieldname):
    """Returns a :class:`FieldInfo` for the named field in a Whoosh schema.

    :raises FieldNotFound: if the schema has no such field.
    """

    if fieldname not in schema:
        raise FieldNotFound(fieldname)
    return FieldInfo(fieldname, schema[fieldname])
