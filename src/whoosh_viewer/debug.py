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
Explains why a query matches the documents it does, by counting the matches
of every clause of the query separately.
"""

from whoosh import query

from whoosh_viewer.querytree import QueryNode, parse_query, query_to_string


class DebugTree:
    """
    Match counts for a query and, recursively, for each of its clauses.

    Attributes:
        count (int): The number of live documents matching ``search_string``.
        query_string (str): The clause itself.
        search_string (str): The query actually counted: the clause, combined
            with the salient-documents query when one was given.
        salient_docs_query_string (str or None): The salient-documents query
            as the caller wrote it; only set on the root.
        children (list): A :class:`DebugTree` for each clause of a boolean
            query.
    """

    def __init__(
        self,
        count=0,
        query_string="",
        search_string="",
        salient_docs_query_string=None,
        children=(),
    ):
        self.count = count
        self.query_string = query_string
        self.search_string = search_string
        self.salient_docs_query_string = salient_docs_query_string
        self.children = list(children)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.query_string!r} {self.count}>"

    @classmethod
    def empty(cls):
        return cls()

    def to_dict(self):
        return {
            "count": self.count,
            "query_string": self.query_string,
            "search_string": self.search_string,
            "salient_docs_query_string": self.salient_docs_query_string,
            "children": [child.to_dict() for child in self.children],
        }


def _debug_node(snapshot, searcher, node, salient):
    if salient is not None:
        search_q = query.And([node.query, salient])
    else:
        search_q = node.query

    count = sum(1 for _ in searcher.docs_for_query(search_q))
    children = [
        _debug_node(snapshot, searcher, child, salient)
        for _, child in node.children()
    ]
    return DebugTree(
        count=count,
        query_string=query_to_string(node, snapshot),
        search_string=query_to_string(search_q, snapshot),
        children=children,
    )


def debug_query(snapshot, text, salient_docs_query=None, default_field=None):
    """Counts the documents matching a query and each of its clauses.

    Parameters:
        snapshot (IndexSnapshot): The snapshot to search.
        text (str): The query string. An empty or missing query gives an empty
            tree.
        salient_docs_query (str): An optional query every count is restricted
            to, for example the documents you expected to find.
        default_field (str): The field for query terms that do not name one.

    Raises:
        QueryParseError: if either query string is invalid.
        UnknownQueryType: if the query contains a clause that cannot be broken
            down.
    """

    if not text:
        return DebugTree.empty()

    q = parse_query(snapshot, text, default_field)
    salient = None
    if salient_docs_query:
        salient = parse_query(snapshot, salient_docs_query, default_field)

    with snapshot.searcher() as searcher:
        tree = _debug_node(snapshot, searcher, QueryNode.from_query(q), salient)
    tree.salient_docs_query_string = salient_docs_query
    return tree
