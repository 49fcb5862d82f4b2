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
Breaks parsed Whoosh queries down into a small, closed set of query kinds so
they can be displayed and explained clause by clause.
"""

from enum import Enum

from whoosh import query
from whoosh.qparser import QueryParser

from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.errors import QueryParseError, UnknownQueryType, ViewerError


class QueryKind(Enum):
    TERM = "term"
    PHRASE = "phrase"
    RANGE = "range"
    BOOLEAN = "boolean"
    ALL = "all"


class Occur(Enum):
    """How a clause of a boolean query participates in matching. The value is
    the prefix used when the clause is written out.
    """

    SHOULD = ""
    MUST = "+"
    MUST_NOT = "-"


class QueryNode:
    """
    One query, tagged with its :class:`QueryKind`.

    Attributes:
        kind (QueryKind): The kind of query.
        query (whoosh.query.Query): The Whoosh query this node describes.
        fieldname (str): The field searched, for term, phrase and range
            queries.
        terms (list): The term text for a term query, or the words of a
            phrase.
        start, end: The bounds of a range query; None means unbounded.
        startexcl, endexcl (bool): Whether the range bounds are excluded.
        clauses (list): ``(Occur, whoosh.query.Query)`` pairs of a boolean
            query.
    """

    def __init__(
        self,
        kind,
        q,
        fieldname=None,
        terms=(),
        start=None,
        end=None,
        startexcl=False,
        endexcl=False,
        clauses=(),
    ):
        self.kind = kind
        self.query = q
        self.fieldname = fieldname
        self.terms = list(terms)
        self.start = start
        self.end = end
        self.startexcl = startexcl
        self.endexcl = endexcl
        self.clauses = list(clauses)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.kind.name} {self.query!r}>"

    @classmethod
    def from_query(cls, q):
        """Describes a Whoosh query.

        :raises UnknownQueryType: if the query is not a term, phrase, range,
            boolean or match-all query.
        """

        if isinstance(q, query.Term):
            return cls(QueryKind.TERM, q, q.fieldname, [q.text])
        elif isinstance(q, query.Phrase):
            return cls(QueryKind.PHRASE, q, q.fieldname, q.words)
        elif isinstance(q, (query.TermRange, query.NumericRange)):
            return cls(
                QueryKind.RANGE,
                q,
                q.fieldname,
                start=q.start,
                end=q.end,
                startexcl=q.startexcl,
                endexcl=q.endexcl,
            )
        elif isinstance(q, query.Every):
            return cls(QueryKind.ALL, q, q.fieldname)
        elif isinstance(q, query.And):
            clauses = [(Occur.MUST, sub) for sub in q.subqueries]
        elif isinstance(q, (query.Or, query.DisjunctionMax)):
            clauses = [(Occur.SHOULD, sub) for sub in q.subqueries]
        elif isinstance(q, query.Not):
            clauses = [(Occur.MUST_NOT, q.query)]
        elif isinstance(q, query.AndNot):
            clauses = [(Occur.MUST, q.a), (Occur.MUST_NOT, q.b)]
        elif isinstance(q, query.AndMaybe):
            clauses = [(Occur.MUST, q.a), (Occur.SHOULD, q.b)]
        elif isinstance(q, query.Require):
            clauses = [(Occur.MUST, q.a), (Occur.MUST, q.b)]
        else:
            raise UnknownQueryType(q)
        return cls(QueryKind.BOOLEAN, q, clauses=clauses)

    def children(self):
        """Returns the ``(Occur, QueryNode)`` clauses of a boolean query, or an
        empty list for any other kind.

        :raises UnknownQueryType: if a clause is of an unknown type.
        """

        return [(occur, QueryNode.from_query(sub)) for occur, sub in self.clauses]


def parse_query(snapshot, text, default_field=None):
    """Parses a query string against the snapshot's schema.

    :raises QueryParseError: if Whoosh reports the query string as invalid.
    """

    parser = QueryParser(default_field, snapshot.schema)
    q = parser.parse(text)
    error = getattr(q, "error", None)
    if error:
        raise QueryParseError(str(error))
    return q


def _term_str(snapshot, fieldname, text, allow_quoting):
    if isinstance(text, bytes):
        try:
            text = str(TypedTermCodec(snapshot.field(fieldname)).decode(text))
        except ViewerError:
            return "<cannot write term>"
    else:
        text = str(text)

    if allow_quoting and " " in text:
        return f'"{text}"'
    return text


def _write(q, snapshot, nested, out):
    try:
        node = q if isinstance(q, QueryNode) else QueryNode.from_query(q)
    except UnknownQueryType:
        out.append(f"<unknown query type {type(q).__name__}>")
        return

    kind = node.kind
    if kind is QueryKind.BOOLEAN:
        if nested:
            out.append("(")
        for i, (occur, sub) in enumerate(node.clauses):
            if i:
                out.append(" ")
            out.append(occur.value)
            _write(sub, snapshot, True, out)
        if nested:
            out.append(")")
    elif kind is QueryKind.TERM:
        out.append(f"{node.fieldname}:")
        out.append(_term_str(snapshot, node.fieldname, node.terms[0], True))
    elif kind is QueryKind.PHRASE:
        words = " ".join(
            _term_str(snapshot, node.fieldname, w, False) for w in node.terms
        )
        out.append(f'{node.fieldname}:"{words}"')
    elif kind is QueryKind.RANGE:
        out.append(f"{node.fieldname}:")
        if node.start is None:
            out.append("[")
        else:
            out.append("{" if node.startexcl else "[")
            out.append(_term_str(snapshot, node.fieldname, node.start, False))
        out.append(" TO ")
        if node.end is None:
            out.append("]")
        else:
            out.append(_term_str(snapshot, node.fieldname, node.end, False))
            out.append("}" if node.endexcl else "]")
    elif kind is QueryKind.ALL:
        out.append("*")


def query_to_string(q, snapshot):
    """Writes a query (a :class:`QueryNode` or a Whoosh query) back out in
    query-string syntax, for example ``+a:"x y" -(b:z c:[1 TO 5})``.

    Queries outside the known kinds are written as
    ``<unknown query type ...>`` instead of raising.
    """

    out = []
    _write(q, snapshot, False, out)
    return "".join(out)
