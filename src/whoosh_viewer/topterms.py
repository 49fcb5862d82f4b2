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
Finds the most frequent terms of a field across all segments of a snapshot.
"""

import heapq
from collections import namedtuple
from itertools import count, groupby
from operator import itemgetter

from loguru import logger

from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.errors import UnsupportedFieldAccess

#: Number of terms returned when the caller does not say
DEFAULT_K = 100


class TermCount(namedtuple("TermCount", "term count")):
    """A term and the number of documents it occurs in."""

    __slots__ = ()

    def __str__(self):
        return f"{self.term}: {self.count}"


def merged_terms(streams):
    """Merges sorted ``(key, doc_frequency)`` streams from several segments into
    one sorted stream of ``(key, total_doc_frequency)``.

    This is a k-way merge: a heap holds the current key of every live stream,
    and all streams positioned on the smallest key are advanced together.

    >>> list(merged_terms([[(b"a", 1), (b"c", 2)], [(b"a", 3), (b"b", 1)]]))
    [(b'a', 4), (b'b', 1), (b'c', 2)]
    """

    key = itemgetter(0)
    for termkey, group in groupby(heapq.merge(*streams, key=key), key=key):
        yield termkey, sum(df for _, df in group)


def _live_doc_frequency(segment, info, key):
    postings = segment.postings(info, key)
    if postings is None:
        return 0
    return sum(1 for docnum in postings.docs() if not segment.is_deleted(docnum))


def _segment_stream(segment, info, exclude_deleted):
    terms = segment.term_dictionary(info).stream()
    if not (exclude_deleted and segment.has_deletions()):
        return terms
    # Count only the live documents in the postings
    return ((key, _live_doc_frequency(segment, info, key)) for key, _ in terms)


def top_terms(snapshot, fieldname, k=DEFAULT_K, exclude_deleted=False):
    """Returns the ``k`` terms of a field that occur in the most documents.

    The result is a list of :class:`TermCount` ordered by count, highest
    first; terms with equal counts are ordered by term value, lowest first.

    Parameters:
        snapshot (IndexSnapshot): The snapshot to read.
        fieldname (str): The name of an indexed field.
        k (int): The maximum number of terms to return.
        exclude_deleted (bool): If False (the default) the counts are the raw
            document frequencies stored in each segment's term dictionary,
            which still include deleted documents. If True, terms in segments
            with deletions are recounted from their postings so only live
            documents are counted, and terms left with no live documents are
            dropped.

    Raises:
        FieldNotFound: if the field does not exist.
        UnsupportedFieldAccess: if the field is not indexed.
    """

    info = snapshot.field(fieldname)
    if not info.indexed:
        raise UnsupportedFieldAccess(fieldname, "term dictionary")
    codec = TypedTermCodec(info)
    if k <= 0:
        return []

    streams = [
        _segment_stream(segment, info, exclude_deleted)
        for segment in snapshot.segments
        if segment.doc_count_all()
    ]

    # Keys arrive in ascending order, so the arrival number orders terms. The
    # heap's smallest entry is the one to evict: the lowest count and, among
    # equal counts, the highest term.
    heap = []
    seq = count()
    distinct = 0
    for key, total in merged_terms(streams):
        distinct += 1
        if not total:
            continue
        entry = (total, -next(seq), key)
        if len(heap) < k:
            heapq.heappush(heap, entry)
        elif entry > heap[0]:
            heapq.heapreplace(heap, entry)

    heap.sort(reverse=True)
    result = [TermCount(codec.decode(key), total) for total, _, key in heap]
    logger.debug(
        "Top {} of {} distinct terms in {!r} across {} segments",
        len(result),
        distinct,
        fieldname,
        len(streams),
    )
    return result
