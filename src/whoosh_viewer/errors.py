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
Exceptions raised by the viewer.

Every error the viewer raises on its own derives from :class:`ViewerError`.
Errors caused by bad caller input (an unknown field name, a segment prefix
that matches nothing, a term that does not parse) have ``client_error`` set
so an application can report them differently from internal failures.
Failures of the underlying index storage are Whoosh's own exceptions and are
not wrapped.
"""


class ViewerError(Exception):
    """
    Base class for all viewer errors.

    Attributes:
        client_error (bool): True when the error was caused by the caller's
            input rather than by the index or the viewer itself.
    """

    client_error = False


class FieldNotFound(ViewerError, KeyError):
    """Raised when a field name is not in the index schema."""

    client_error = True

    def __init__(self, fieldname):
        super().__init__(fieldname)
        self.fieldname = fieldname

    def __str__(self):
        return f"Field {self.fieldname!r} does not exist"


class UnsupportedFieldAccess(ViewerError):
    """Raised when postings or column access is requested on a field that was
    not indexed that way.
    """

    client_error = True

    def __init__(self, fieldname, access):
        super().__init__(fieldname, access)
        self.fieldname = fieldname
        self.access = access

    def __str__(self):
        return f"Field {self.fieldname!r} does not support {self.access} access"


class SegmentNotFound(ViewerError):
    """Raised when a segment ID or prefix matches no active segment."""

    client_error = True

    def __init__(self, segment_id):
        super().__init__(segment_id)
        self.segment_id = segment_id

    def __str__(self):
        return f"Could not find a segment with the given prefix {self.segment_id!r}"


class DocumentNotFound(ViewerError, IndexError):
    """Raised when a document number is outside the range of its segment."""

    client_error = True

    def __init__(self, segment_id, docnum):
        super().__init__(segment_id, docnum)
        self.segment_id = segment_id
        self.docnum = docnum

    def __str__(self):
        return f"Document {self.docnum!r} is not in segment {self.segment_id}"


class InvalidTermValue(ViewerError, ValueError):
    """Raised when the text of a term cannot be parsed into the field's
    declared value type.
    """

    client_error = True

    def __init__(self, fieldname, text, reason):
        super().__init__(fieldname, text, reason)
        self.fieldname = fieldname
        self.text = text
        self.reason = reason

    def __str__(self):
        return f"Invalid term {self.text!r} for field {self.fieldname!r}: {self.reason}"


class Unimplemented(ViewerError, NotImplementedError):
    """Raised for field types whose terms the viewer cannot encode or decode."""

    def __init__(self, fieldname, what):
        super().__init__(fieldname, what)
        self.fieldname = fieldname
        self.what = what

    def __str__(self):
        return f"{self.what} is not implemented for field {self.fieldname!r}"


class UnknownQueryType(ViewerError):
    """Raised when a query cannot be broken down into the known query kinds."""

    def __init__(self, q):
        super().__init__(q)
        self.query = q

    def __str__(self):
        return f"Could not break down unknown query type {type(self.query).__name__}"


class QueryParseError(ViewerError):
    """Raised when Whoosh reports a query string as invalid."""

    client_error = True
