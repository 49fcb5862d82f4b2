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
Looks up the documents that contain an exact term.
"""

from whoosh_viewer.codec import TypedTermCodec
from whoosh_viewer.errors import UnsupportedFieldAccess


def term_docs(snapshot, fieldname, text):
    """Returns ``(segment_id, docnum)`` for every live document containing the
    term, segment by segment, with document numbers ascending within each
    segment.

    The text is parsed according to the field's type (so ``"42"`` finds the
    number 42 in a numeric field) but is not analyzed: ``"Hello"`` will not
    match the lowercased term ``hello``.

    :raises FieldNotFound: if the field does not exist.
    :raises UnsupportedFieldAccess: if the field is not indexed.
    :raises InvalidTermValue: if the text is not a valid value for the field.
    """

    info = snapshot.field(fieldname)
    if not info.indexed:
        raise UnsupportedFieldAccess(fieldname, "postings")
    key = TypedTermCodec(info).key_for_text(text)

    result = []
    for segment in snapshot.segments:
        postings = segment.postings(info, key)
        if postings is not None:
            result.extend(
                (segment.segment_id, docnum)
                for docnum in postings.docs()
                if not segment.is_deleted(docnum)
            )
    return result
