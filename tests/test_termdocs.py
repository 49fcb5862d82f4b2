import pytest
from whoosh import analysis, columns, fields
from whoosh.filedb.filestore import RamStorage
from whoosh_viewer.errors import FieldNotFound, InvalidTermValue, UnsupportedFieldAccess
from whoosh_viewer.snapshot import IndexSnapshot
from whoosh_viewer.termdocs import term_docs


def _index():
    schema = fields.Schema(
        body=fields.TEXT(analyzer=analysis.SpaceSeparatedTokenizer()),
        price=fields.NUMERIC(bits=64, signed=True),
        rank=fields.COLUMN(columns.NumericColumn("i")),
    )
    ix = RamStorage().create_index(schema)
    w = ix.writer()
    w.add_document(body="Hello world", price=42, rank=1)
    w.add_document(body="hello there", price=-7, rank=2)
    w.add_document(body="world", price=42, rank=3)
    w.commit()

    w = ix.writer()
    w.add_document(body="world peace", price=42, rank=4)
    w.add_document(body="war", price=0, rank=5)
    w.commit(merge=False)
    return ix


def test_text_term():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        first, second = [s.segment_id for s in snap.segments]
        assert term_docs(snap, "body", "world") == [
            (first, 0),
            (first, 2),
            (second, 0),
        ]
        assert term_docs(snap, "body", "Hello") == [(first, 0)]
        assert term_docs(snap, "body", "hello") == [(first, 1)]


def test_missing_term():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        assert term_docs(snap, "body", "nothing") == []


def test_numeric_term():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        first, second = [s.segment_id for s in snap.segments]
        assert term_docs(snap, "price", "42") == [(first, 0), (first, 2), (second, 0)]
        assert term_docs(snap, "price", "-7") == [(first, 1)]
        assert term_docs(snap, "price", "99") == []


def test_deleted_documents_left_out():
    ix = _index()
    w = ix.writer()
    w.delete_document(2)
    w.commit(merge=False)

    with IndexSnapshot(ix) as snap:
        first, second = [s.segment_id for s in snap.segments]
        assert term_docs(snap, "body", "world") == [(first, 0), (second, 0)]


def test_errors():
    ix = _index()
    with IndexSnapshot(ix) as snap:
        with pytest.raises(FieldNotFound):
            term_docs(snap, "nope", "x")
        with pytest.raises(UnsupportedFieldAccess):
            term_docs(snap, "rank", "1")
        with pytest.raises(InvalidTermValue):
            term_docs(snap, "price", "forty-two")
