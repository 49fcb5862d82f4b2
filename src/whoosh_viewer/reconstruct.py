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
Rebuilds the contents of a field for a set of documents from what the index
actually stores, rather than from stored field values.

For an indexed field the contents are rebuilt from the postings: every term in
the segment's dictionary is visited once, its postings are walked forward
through the requested documents, and the term is written into each document
that contains it at the positions the postings record. For a field that only
has a column the values are read from the column. The result for each
document is a list indexed by token position, where ``None`` marks a position
no term occupies (for example a removed stop word).
"""

from enum import Enum

from loguru import logger

from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.segments import SkipResult
from whoosh_viewer.values import stringify_values


class CursorState(Enum):
    """Where a term's postings cursor is relative to the requested documents."""

    NOT_SOUGHT = "not_sought"
    REACHED = "reached"
    PAST_END = "past_end"


class TermCursor:
    """
    Drives one term's postings through the requested documents of a segment.

    The requested document numbers must be visited in ascending order. The
    postings are only asked to skip when they are behind the requested
    document, so they never move backwards; when they have already landed on
    or past it, the cursor just compares document numbers.
    """

    def __init__(self, postings):
        self.postings = postings
        self.state = CursorState.NOT_SOUGHT
        self.doc = None

    def seek(self, docnum):
        """Returns True if the postings are positioned on ``docnum``."""

        if self.state is CursorState.PAST_END:
            return False
        if self.state is CursorState.REACHED and self.doc >= docnum:
            return self.doc == docnum

        result = self.postings.skip_to(docnum)
        if result is SkipResult.END:
            self.state = CursorState.PAST_END
            self.doc = None
            return False

        self.state = CursorState.REACHED
        self.doc = self.postings.doc()
        return result is SkipResult.REACHED


def _place(output, postings, value):
    positions = postings.positions()
    if not positions:
        # The field only records frequencies
        output.extend([value] * postings.term_freq())
        return

    last = max(positions)
    if last >= len(output):
        output.extend([None] * (last + 1 - len(output)))
    for pos in positions:
        output[pos] = value


def _reconstruct_positional(segment, info, docnums, outputs):
    codec = TypedTermCodec(info)
    for key, _ in segment.term_dictionary(info).stream():
        postings = segment.postings(info, key)
        if postings is None:
            continue

        cursor = TermCursor(postings)
        value = None
        for docnum, output in zip(docnums, outputs):
            if cursor.seek(docnum):
                if value is None:
                    value = codec.decode(key)
                _place(output, postings, value)
            elif cursor.state is CursorState.PAST_END:
                break


def _reconstruct_columnar(segment, info, docnums, outputs):
    reader = segment.fast_field(info)
    for docnum, output in zip(docnums, outputs):
        output.extend(reader.get(docnum))


def _reconstruct_segment(segment, info, docnums):
    for docnum in docnums:
        segment.check_docnum(docnum)

    # Walk each document once, in ascending order
    ordered = sorted(set(docnums))
    outputs = [[] for _ in ordered]

    if info.positional:
        logger.debug(
            "Reconstructing {!r} for {} docs in {} from postings",
            info.name,
            len(ordered),
            segment,
        )
        _reconstruct_positional(segment, info, ordered, outputs)
    elif info.columnar:
        logger.debug(
            "Reconstructing {!r} for {} docs in {} from column",
            info.name,
            len(ordered),
            segment,
        )
        _reconstruct_columnar(segment, info, ordered, outputs)

    bydoc = dict(zip(ordered, outputs))
    return [(docnum, list(bydoc[docnum])) for docnum in docnums]


def reconstruct(snapshot, fieldname, docs):
    """Reconstructs a field for many documents at once.

    A segment's term dictionary is read only once, however many of its
    documents are requested, so ask for all the documents you need in a single
    call.

    Parameters:
        snapshot (IndexSnapshot): The snapshot to read.
        fieldname (str): The field to reconstruct.
        docs (dict): Maps segment IDs to lists of segment-local document
            numbers.

    Returns:
        dict: Maps each requested segment ID to a list of
        ``(docnum, values)`` pairs in the order the document numbers were
        given. ``values`` is a list of :class:`~whoosh_viewer.values.TermValue`
        or None. A field with neither postings nor a column reconstructs to
        empty lists.

    Raises:
        FieldNotFound: if the field does not exist.
        SegmentNotFound: if a segment ID is not in the snapshot.
        DocumentNotFound: if a document number is outside its segment.
    """

    info = snapshot.field(fieldname)
    segments = [(snapshot.segment(segid), docnums) for segid, docnums in docs.items()]
    return {
        segment.segment_id: _reconstruct_segment(segment, info, docnums)
        for segment, docnums in segments
    }


def reconstruct_one(snapshot, fieldname, segment_id, docnum):
    """Reconstructs a field for a single document.

    :raises SegmentNotFound: if the segment ID is not in the snapshot.
    """

    result = reconstruct(snapshot, fieldname, {segment_id: [docnum]})
    return result[segment_id][0][1]


def reconstruct_to_string(snapshot, fieldname, segment_prefix, docnum):
    """Reconstructs a field for a single document in the segment whose ID
    starts with ``segment_prefix`` and returns it as display text.
    """

    segment = snapshot.find_segment(segment_prefix)
    return stringify_values(
        reconstruct_one(snapshot, fieldname, segment.segment_id, docnum)
    )


def reconstruct_fields(snapshot, fieldnames, segment_prefix, docnum):
    """Reconstructs several fields of one document as display text.

    Returns a list of ``(fieldname, text)`` pairs sorted by field name.
    """

    return [
        (fieldname, reconstruct_to_string(snapshot, fieldname, segment_prefix, docnum))
        for fieldname in sorted(fieldnames)
    ]
