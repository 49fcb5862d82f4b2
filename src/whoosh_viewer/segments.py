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
Read-only views of the parts of a single index segment: its term dictionary,
postings and columns.

These objects wrap one of Whoosh's leaf ``SegmentReader`` objects. They hold
no state of their own beyond cursors, are only valid while the
:class:`~whoosh_viewer.snapshot.IndexSnapshot` that created them is open, and
never modify the index. Document numbers are local to the segment.
"""

from enum import Enum

from whoosh import columns
from whoosh.reading import TermNotFound

from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.errors import DocumentNotFound, Unimplemented, UnsupportedFieldAccess
from whoosh_viewer.schema import FastCardinality
from whoosh_viewer.values import TermValue, ValueType


class SkipResult(Enum):
    """The outcome of :meth:`PostingsReader.skip_to`."""

    #: The postings are positioned on the requested document
    REACHED = "reached"
    #: The postings moved to a later document
    OVERSTEP = "overstep"
    #: There are no more documents at or after the requested one
    END = "end"


class Segment:
    """
    One segment of an index snapshot.

    Parameters:
        reader (whoosh.reading.SegmentReader): The leaf reader for the segment.
        offset (int): The number of the segment's first document in the
            snapshot's global document numbering.
    """

    def __init__(self, reader, offset=0):
        self.reader = reader
        self.offset = offset
        self.segment_id = reader.segment().segment_id()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.segment_id}>"

    @property
    def short_id(self):
        """The random part of the segment ID, without the index name."""
        return self.segment_id.rsplit("_", 1)[-1]

    def matches(self, prefix):
        return self.segment_id.startswith(prefix) or self.short_id.startswith(prefix)

    def doc_count(self):
        return self.reader.doc_count()

    def doc_count_all(self):
        return self.reader.doc_count_all()

    def has_deletions(self):
        return self.reader.has_deletions()

    def is_deleted(self, docnum):
        return self.reader.is_deleted(docnum)

    def check_docnum(self, docnum):
        if not 0 <= docnum < self.doc_count_all():
            raise DocumentNotFound(self.segment_id, docnum)

    def term_dictionary(self, info):
        """Returns a :class:`TermDictionaryReader` for the given field.

        :param info: a :class:`~whoosh_viewer.schema.FieldInfo`.
        """

        if not info.indexed:
            raise UnsupportedFieldAccess(info.name, "term dictionary")
        return TermDictionaryReader(self.reader, info)

    def postings(self, info, key):
        """Returns a :class:`PostingsReader` for a term key, or None if the term
        does not occur in this segment (or only in deleted documents).
        """

        if not info.indexed:
            raise UnsupportedFieldAccess(info.name, "postings")
        try:
            matcher = self.reader.postings(info.name, key)
        except TermNotFound:
            return None
        return PostingsReader(matcher)

    def fast_field(self, info):
        """Returns a :class:`FastFieldReader` for the field's column."""

        if info.fast is None:
            raise UnsupportedFieldAccess(info.name, "fast field")
        return FastFieldReader(self.reader, info)


class TermDictionaryReader:
    """
    The sorted terms of one field in one segment.

    Keys are yielded in strictly increasing byte order. For numeric fields only
    full-precision keys are visible.
    """

    def __init__(self, reader, info):
        self._reader = reader
        self._info = info
        self._codec = TypedTermCodec(info)

    def stream(self):
        """Yields ``(key, doc_frequency)`` for every term in the field."""
        return self.prefix(b"")

    def prefix(self, prefix):
        """Yields ``(key, doc_frequency)`` for every term starting with the
        given bytes.
        """

        is_full = self._codec.is_full_precision
        for key, terminfo in self._reader.iter_field(self._info.name, prefix):
            if not key.startswith(prefix) or not is_full(key):
                # Lower-precision numeric keys sort after every full value
                break
            yield key, terminfo.doc_frequency()

    def seek(self, key):
        """Returns the document frequency of an exact key, or None if the key is
        not in the dictionary.
        """

        if not self._codec.is_full_precision(key):
            return None
        try:
            terminfo = self._reader.term_info(self._info.name, key)
        except TermNotFound:
            return None
        return terminfo.doc_frequency()


class PostingsReader:
    """
    A forward-only cursor over the documents containing one term.

    The cursor starts on the term's first document. Whoosh leaves deleted
    documents out of a segment's postings.
    """

    def __init__(self, matcher):
        self._matcher = matcher

    def doc(self):
        """The current document number, or None once the postings are
        exhausted.
        """

        if self._matcher.is_active():
            return self._matcher.id()
        return None

    def skip_to(self, docnum):
        """Moves to the first document at or after ``docnum``.

        The cursor never moves backwards: if it is already past ``docnum`` it
        stays where it is and reports :attr:`SkipResult.OVERSTEP`.
        """

        m = self._matcher
        if not m.is_active():
            return SkipResult.END
        if m.id() < docnum:
            m.skip_to(docnum)
            if not m.is_active():
                return SkipResult.END
        if m.id() == docnum:
            return SkipResult.REACHED
        return SkipResult.OVERSTEP

    def term_freq(self):
        """The number of times the term occurs in the current document."""

        m = self._matcher
        if m.supports("frequency"):
            return int(m.value_as("frequency"))
        return 1

    def positions(self):
        """The token positions of the term in the current document, or None if
        the field does not record positions.
        """

        m = self._matcher
        if m.supports("positions"):
            return list(m.value_as("positions"))
        return None

    def docs(self):
        """Yields the remaining document numbers, consuming the cursor."""

        m = self._matcher
        while m.is_active():
            yield m.id()
            m.next()


class FastFieldReader:
    """
    Direct per-document access to a field's column.
    """

    def __init__(self, reader, info):
        if info.value_type == ValueType.OPAQUE:
            raise Unimplemented(info.name, "Reading OPAQUE columns")
        self.cardinality = info.fast
        self._info = info
        self._column = reader.column_reader(info.name)

    def get(self, docnum):
        """Returns the document's values as a list of :class:`TermValue`.

        Single-valued columns always give one value (the column default when
        the document has none); multi-valued columns give their values in
        storage order. Pickled values may be ints, strings or bytes.

        :raises Unimplemented: if a pickled value is of any other type.
        """

        vt = self._info.value_type
        value = self._column[docnum]
        if isinstance(self._info.column, columns.PickleColumn):
            return self._pickled(value)
        if self.cardinality == FastCardinality.MULTI:
            return [TermValue.of(vt, v) for v in (value or ())]
        return [TermValue.of(vt, value)]

    def _pickled(self, value):
        # Pickled columns may hold any object; a bare value counts as a list
        # of one
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            value = [value]

        result = []
        for v in value:
            if isinstance(v, int) and not isinstance(v, bool):
                result.append(TermValue.i64(v))
            elif isinstance(v, str):
                result.append(TermValue.text(v))
            elif isinstance(v, bytes):
                result.append(TermValue.bytes(v))
            else:
                raise Unimplemented(
                    self._info.name, f"Reading pickled {type(v).__name__} values"
                )
        return result
