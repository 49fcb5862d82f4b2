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
An immutable, already-committed view of an index that all viewer operations
read from.
"""

from cached_property import cached_property
from loguru import logger
from whoosh import index
from whoosh.reading import SegmentReader
from whoosh.searching import Searcher

from whoosh_viewer.errors import SegmentNotFound
from whoosh_viewer.schema import field_info
from whoosh_viewer.segments import Segment


class IndexSnapshot:
    """
    Holds one reader open on a Whoosh index for the duration of a request.

    Everything read through the snapshot (segments, term dictionaries,
    postings, columns) reflects the index as it was committed when the
    snapshot was opened, no matter what writers do afterwards. Use the
    snapshot as a context manager so the reader is closed on exit::

        with IndexSnapshot(ix) as snap:
            print(top_terms(snap, "content", 10))

    Parameters:
        ix (whoosh.index.Index): An opened Whoosh index.
    """

    def __init__(self, ix):
        self.ix = ix
        self.reader = ix.reader()
        self.schema = self.reader.schema
        self.is_closed = False
        self._fields = {}
        logger.debug(
            "Opened snapshot with {} documents in {} segments",
            self.reader.doc_count_all(),
            len(self.segments),
        )

    @classmethod
    def open_dir(cls, dirname, indexname=None):
        """Opens a snapshot of the index stored in a directory."""
        return cls(index.open_dir(dirname, indexname=indexname))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.segments!r}>"

    def close(self):
        if not self.is_closed:
            self.reader.close()
            self.is_closed = True
            logger.debug("Closed snapshot")

    # Fields

    def field(self, fieldname):
        """Returns the :class:`~whoosh_viewer.schema.FieldInfo` for a field.

        :raises FieldNotFound: if the schema has no such field.
        """

        try:
            return self._fields[fieldname]
        except KeyError:
            info = self._fields[fieldname] = field_info(self.schema, fieldname)
            return info

    def field_type(self, fieldname):
        """Returns the :class:`~whoosh_viewer.values.ValueType` of a field."""
        return self.field(fieldname).value_type

    # Segments

    @cached_property
    def segments(self):
        """The segments of the snapshot, in document-number order."""

        return [
            Segment(r, offset)
            for r, offset in self.reader.leaf_readers()
            if isinstance(r, SegmentReader)
        ]

    def segment(self, segment_id):
        """Returns the segment with exactly the given ID.

        :raises SegmentNotFound: if there is no such segment.
        """

        for segment in self.segments:
            if segment.segment_id == segment_id:
                return segment
        raise SegmentNotFound(segment_id)

    def find_segment(self, prefix):
        """Returns the first segment whose full or short ID starts with the
        given prefix.

        :raises SegmentNotFound: if no segment matches.
        """

        if prefix:
            for segment in self.segments:
                if segment.matches(prefix):
                    return segment
        raise SegmentNotFound(prefix)

    # Searching

    def searcher(self, **kwargs):
        """Returns a Whoosh searcher over the snapshot. Closing the searcher
        does not close the snapshot.
        """

        return Searcher(self.reader, closereader=False, **kwargs)
