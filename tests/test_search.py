import pytest
from whoosh import analysis, columns, fields, query
from whoosh.filedb.filestore import RamStorage
from whoosh_viewer.errors import FieldNotFound
from whoosh_viewer.search import collect_first_k, search
from whoosh_viewer.snapshot import IndexSnapshot


def _index(split=False):
    schema = fields.Schema(
        id=fields.COLUMN(columns.NumericColumn("q")),
        body=fields.TEXT(analyzer=analysis.SpaceSeparatedTokenizer()),
    )
    ix = RamStorage().create_index(schema)
    w = ix.writer()
    w.add_document(id=1, body="A B C")
    w.add_document(id=2, body="B C")
    w.add_document(id=3, body="C")
    w.commit()
    if split:
        w = ix.writer()
        w.add_document(id=4, body="C D")
        w.commit(merge=False)
    return ix


def test_search_reconstructs_fields():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        short_id = snap.segments[0].short_id
        results = search(snap, "B", fields=["body", "id"], default_field="body")
        assert results.query == "B"
        assert results.reconstructed_fields == ["body", "id"]
        assert not results.truncated
        assert results.docs == [
            (short_id, [(0, ["A B C ", "1 "]), (1, ["B C ", "2 "])]),
        ]


def test_search_truncated():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        short_id = snap.segments[0].short_id
        results = search(snap, "C", fields=["body"], limit=2, default_field="body")
        assert results.truncated
        assert results.docs == [(short_id, [(0, ["A B C "]), (1, ["B C "])])]

        results = search(snap, "C", fields=["body"], limit=3, default_field="body")
        assert not results.truncated
        assert [d for d, _ in results.docs[0][1]] == [0, 1, 2]


def test_search_truncated_at_segment_boundary():
    ix = _index(split=True)
    with IndexSnapshot(ix) as snap:
        first, second = [s.short_id for s in snap.segments]

        # The extra match is the first document of the next segment
        results = search(snap, "C", fields=["id"], limit=3, default_field="body")
        assert results.truncated
        assert results.docs == [(first, [(0, ["1 "]), (1, ["2 "]), (2, ["3 "])])]

        results = search(snap, "C", fields=["id"], limit=4, default_field="body")
        assert not results.truncated
        assert results.docs == [
            (first, [(0, ["1 "]), (1, ["2 "]), (2, ["3 "])]),
            (second, [(0, ["4 "])]),
        ]

        results = search(snap, "D", fields=["body"], default_field="body")
        assert results.docs == [(second, [(0, ["C D "])])]


def test_search_without_fields():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        short_id = snap.segments[0].short_id
        results = search(snap, "A", default_field="body")
        assert results.reconstructed_fields == []
        assert results.docs == [(short_id, [(0, [])])]


def test_search_no_matches():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        results = search(snap, "Z", fields=["body"], default_field="body")
        assert results.docs == []
        assert not results.truncated

        results = search(snap, "", fields=["body"])
        assert results.query == ""
        assert results.docs == []


def test_search_skips_deleted():
    ix = _index()
    with ix.writer() as w:
        w.delete_document(1)

    with IndexSnapshot(ix) as snap:
        results = search(snap, "C", fields=["id"], default_field="body")
        assert [(d, texts) for d, texts in results.docs[0][1]] == [
            (0, ["1 "]),
            (2, ["3 "]),
        ]


def test_search_unknown_field():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        with pytest.raises(FieldNotFound):
            search(snap, "C", fields=["nope"], default_field="body")


def test_collect_first_k():
    ix = _index(split=True)
    with IndexSnapshot(ix) as snap:
        first, second = [s.segment_id for s in snap.segments]
        q = query.Term("body", "C")
        assert collect_first_k(snap, q, 0) == []
        assert collect_first_k(snap, q, 2) == [(first, [0, 1])]
        assert collect_first_k(snap, q, 10) == [(first, [0, 1, 2]), (second, [0])]
