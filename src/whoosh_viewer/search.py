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
Runs a query and shows the matching documents by reconstructing a chosen set
of their fields from the index.
"""

from collections import namedtuple

from loguru import logger

from whoosh_viewer.querytree import parse_query
from whoosh_viewer.reconstruct import reconstruct
from whoosh_viewer.values import stringify_values

#: Maximum number of documents shown when the caller does not say
DEFAULT_LIMIT = 1000


SearchResults = namedtuple(
    "SearchResults", "query reconstructed_fields docs truncated"
)
SearchResults.__doc__ = """The result of :func:`search`.

``docs`` is a list of ``(short_segment_id, [(docnum, [text, ...])])`` with one
text per entry of ``reconstructed_fields``. ``truncated`` is True if more
documents matched than were kept.
"""


def collect_first_k(snapshot, q, k):
    """Collects the first ``k`` live documents matching a Whoosh query, in
    segment order, without scoring.

    Returns a list of ``(segment_id, [docnum, ...])`` for the segments that
    had matches.
    """

    result = []
    remaining = k
    if remaining <= 0:
        return result

    by_reader = {id(segment.reader): segment for segment in snapshot.segments}
    with snapshot.searcher() as searcher:
        for subsearcher, _ in searcher.leaf_searchers():
            segment = by_reader.get(id(subsearcher.reader()))
            if segment is None:
                continue

            docnums = []
            for docnum in q.docs(subsearcher):
                if segment.is_deleted(docnum):
                    continue
                docnums.append(docnum)
                remaining -= 1
                if not remaining:
                    break
            if docnums:
                result.append((segment.segment_id, docnums))
            if not remaining:
                break
    return result


def search(snapshot, text, fields=(), limit=DEFAULT_LIMIT, default_field=None):
    """Finds the documents matching a query string and reconstructs the given
    fields for each of them as display text.

    Parameters:
        snapshot (IndexSnapshot): The snapshot to search.
        text (str): The query string. An empty query gives empty results.
        fields (list): The names of the fields to reconstruct for each hit.
        limit (int): The maximum number of documents to return.
        default_field (str): The field for query terms that do not name one.

    Raises:
        QueryParseError: if the query string is invalid.
        FieldNotFound: if one of ``fields`` does not exist.
    """

    fields = list(fields)
    if not text:
        return SearchResults("", fields, [], False)

    q = parse_query(snapshot, text, default_field)
    hits = collect_first_k(snapshot, q, limit + 1)

    remaining = limit
    kept = []
    truncated = False
    for segment_id, docnums in hits:
        if len(docnums) > remaining:
            truncated = True
            docnums = docnums[:remaining]
        if docnums:
            kept.append((segment_id, docnums))
        remaining -= len(docnums)
    if truncated:
        logger.debug("Search for {!r} truncated to {} documents", text, limit)

    to_reconstruct = dict(kept)
    texts = []
    for fieldname in fields:
        reconstructed = reconstruct(snapshot, fieldname, to_reconstruct)
        texts.append(
            {
                segment_id: [stringify_values(values) for _, values in docs]
                for segment_id, docs in reconstructed.items()
            }
        )

    docs = []
    for segment_id, docnums in kept:
        short_id = snapshot.segment(segment_id).short_id
        rows = [
            (docnum, [fieldtexts[segment_id][i] for fieldtexts in texts])
            for i, docnum in enumerate(docnums)
        ]
        docs.append((short_id, rows))

    return SearchResults(text, fields, docs, truncated)
