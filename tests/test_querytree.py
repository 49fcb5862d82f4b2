import pytest
from whoosh import analysis, fields, query
from whoosh.filedb.filestore import RamStorage
from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.debug import DebugTree, debug_query
from whoosh_viewer.errors import UnknownQueryType
from whoosh_viewer.querytree import (
    Occur,
    QueryKind,
    QueryNode,
    parse_query,
    query_to_string,
)
from whoosh_viewer.snapshot import IndexSnapshot


def _index():
    schema = fields.Schema(
        body=fields.TEXT(analyzer=analysis.SpaceSeparatedTokenizer()),
        price=fields.NUMERIC(bits=64, signed=True),
    )
    ix = RamStorage().create_index(schema)
    w = ix.writer()
    w.add_document(body="A B C", price=1)
    w.add_document(body="B C", price=2)
    w.add_document(body="C", price=3)
    w.commit()
    return ix


def test_kinds():
    a = query.Term("body", "A")
    b = query.Term("body", "B")

    node = QueryNode.from_query(a)
    assert node.kind is QueryKind.TERM
    assert node.fieldname == "body"
    assert node.terms == ["A"]
    assert node.children() == []

    node = QueryNode.from_query(query.Phrase("body", ["x", "y"]))
    assert node.kind is QueryKind.PHRASE
    assert node.terms == ["x", "y"]

    node = QueryNode.from_query(query.TermRange("body", "a", None, startexcl=True))
    assert node.kind is QueryKind.RANGE
    assert (node.start, node.end) == ("a", None)
    assert node.startexcl and not node.endexcl

    assert QueryNode.from_query(query.Every()).kind is QueryKind.ALL

    node = QueryNode.from_query(query.AndNot(a, b))
    assert node.kind is QueryKind.BOOLEAN
    assert [occur for occur, _ in node.clauses] == [Occur.MUST, Occur.MUST_NOT]
    children = node.children()
    assert [child.kind for _, child in children] == [QueryKind.TERM, QueryKind.TERM]
    assert children[1][1].query is b


def test_boolean_occurs():
    a = query.Term("body", "A")
    b = query.Term("body", "B")

    def occurs(q):
        return [occur for occur, _ in QueryNode.from_query(q).clauses]

    assert occurs(query.And([a, b])) == [Occur.MUST, Occur.MUST]
    assert occurs(query.Or([a, b])) == [Occur.SHOULD, Occur.SHOULD]
    assert occurs(query.DisjunctionMax([a, b])) == [Occur.SHOULD, Occur.SHOULD]
    assert occurs(query.Not(a)) == [Occur.MUST_NOT]
    assert occurs(query.AndMaybe(a, b)) == [Occur.MUST, Occur.SHOULD]
    assert occurs(query.Require(a, b)) == [Occur.MUST, Occur.MUST]


def test_unknown_kind():
    with pytest.raises(UnknownQueryType) as e:
        QueryNode.from_query(query.Prefix("body", "ab"))
    assert e.value.query == query.Prefix("body", "ab")

    q = query.Or([query.Term("body", "a"), query.Prefix("body", "b")])
    node = QueryNode.from_query(q)
    with pytest.raises(UnknownQueryType):
        node.children()


def test_to_string():
    ix = _index()
    a = query.Term("body", "A")
    b = query.Term("body", "B")

    with IndexSnapshot(ix) as snap:
        assert query_to_string(a, snap) == "body:A"
        q = query.And([a, query.Not(b)])
        assert query_to_string(q, snap) == "+body:A +(-body:B)"
        assert query_to_string(query.AndNot(a, b), snap) == "+body:A -body:B"
        assert query_to_string(query.Or([a, b]), snap) == "body:A body:B"
        q = query.Or([query.And([a, b]), query.Term("body", "C")])
        assert query_to_string(q, snap) == "(+body:A +body:B) body:C"
        assert query_to_string(query.Phrase("body", ["x", "y"]), snap) == 'body:"x y"'
        assert query_to_string(query.Term("body", "x y"), snap) == 'body:"x y"'
        assert query_to_string(query.Every(), snap) == "*"
        assert query_to_string(QueryNode.from_query(a), snap) == "body:A"


def test_ranges_to_string():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        q = query.NumericRange("price", 1, 5, endexcl=True)
        assert query_to_string(q, snap) == "price:[1 TO 5}"

        q = query.TermRange("body", "a", "c", startexcl=True)
        assert query_to_string(q, snap) == "body:{a TO c]"
        q = query.TermRange("body", None, "c")
        assert query_to_string(q, snap) == "body:[ TO c]"
        q = query.TermRange("body", "a", None)
        assert query_to_string(q, snap) == "body:[a TO ]"


def test_byte_terms_to_string():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        key = TypedTermCodec(snap.field("price")).key_for_text("-42")
        assert query_to_string(query.Term("price", key), snap) == "price:-42"
        assert query_to_string(query.Term("body", b"abc"), snap) == "body:abc"

        bad = "<cannot write term>"
        assert query_to_string(query.Term("body", b"\xff"), snap) == "body:" + bad
        assert query_to_string(query.Term("nope", b"x"), snap) == "nope:" + bad


def test_unknown_to_string():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        q = query.Or([query.Term("body", "A"), query.Prefix("body", "b")])
        assert query_to_string(q, snap) == "body:A <unknown query type Prefix>"


def test_parse_query():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        q = parse_query(snap, "A B", "body")
        assert q == query.And([query.Term("body", "A"), query.Term("body", "B")])
        assert query_to_string(q, snap) == "+body:A +body:B"

        q = parse_query(snap, "body:A OR NOT body:B")
        assert query_to_string(q, snap) == "body:A (-body:B)"


def test_debug_counts():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        tree = debug_query(snap, "A B", default_field="body")
        assert tree.count == 1
        assert tree.query_string == "+body:A +body:B"
        assert tree.search_string == "+body:A +body:B"
        assert tree.salient_docs_query_string is None
        assert [(c.query_string, c.count) for c in tree.children] == [
            ("body:A", 1),
            ("body:B", 2),
        ]
        assert all(c.children == [] for c in tree.children)


def test_debug_salient():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        tree = debug_query(
            snap, "B OR C", salient_docs_query="NOT A", default_field="body"
        )
        assert tree.salient_docs_query_string == "NOT A"
        assert tree.count == 2
        assert [(c.query_string, c.count) for c in tree.children] == [
            ("body:B", 1),
            ("body:C", 2),
        ]
        assert tree.children[0].search_string == "+body:B +(-body:A)"
        assert tree.children[0].salient_docs_query_string is None


def test_debug_empty_and_deleted():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        tree = debug_query(snap, "", default_field="body")
        assert tree.count == 0
        assert tree.children == []
        assert tree.to_dict() == DebugTree.empty().to_dict()

    with ix.writer() as w:
        w.delete_document(0)

    with IndexSnapshot(ix) as snap:
        tree = debug_query(snap, "C", default_field="body")
        assert tree.count == 2


def test_debug_unknown_query():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        with pytest.raises(UnknownQueryType):
            debug_query(snap, "A*", default_field="body")


def test_debug_to_dict():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        d = debug_query(snap, "A B", default_field="body").to_dict()
        assert d["count"] == 1
        assert d["query_string"] == "+body:A +body:B"
        assert [c["count"] for c in d["children"]] == [1, 2]
        assert d["children"][0]["children"] == []
