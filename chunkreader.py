# Copyright (c) 2016 Peter Eastman
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


import io
import logging

logger = logging.getLogger(__name__)

_EMPTY = memoryview(b'')


def asByteView(chunk):
    """Get a flat, unsigned byte view of a chunk.

    Parameters
    ----------
    chunk : bytes-like object or str
        anything exporting the buffer protocol (bytes, bytearray, memoryview, NumPy array, ...).  A str is viewed as
        its UTF-8 representation.

    Returns
    -------
    view : memoryview
        a one dimensional view with format 'B'.  The data is only copied if the chunk cannot be viewed directly as
        bytes (non-contiguous or non-native layouts).
    """
    if isinstance(chunk, str):
        chunk = chunk.encode('utf-8')
    view = memoryview(chunk)
    try:
        return view.cast('B')
    except (TypeError, ValueError):
        return memoryview(view.tobytes())


def _checkContiguous(view):
    if not view.c_contiguous:
        raise ValueError('destination buffer must be C-contiguous, got a view with shape %r and strides %r'
                         % (view.shape, view.strides))


class ChunkBufferedReader(io.RawIOBase):
    """Adapter for reading the output of a producer function as a binary stream.

    A producer is free to hand out data in arbitrary sized chunks.  Most code that consumes bytes instead expects a
    file object that lets the reader dictate how much data it receives.  A ChunkBufferedReader acts as an adapter to
    allow that: it calls the producer whenever it runs out of data, and keeps whatever part of a chunk did not fit in
    the caller's buffer for the next read.

    The producer is any function taking no arguments.  Each call must return either the next chunk of data (bytes,
    bytearray, memoryview, NumPy array, str, or anything else exporting the buffer protocol) or None to indicate
    there is no more data.  Once it has returned None it is never called again.  Chunks are not copied, so a producer
    must not modify a chunk until it is called again.  It may then reuse the same object for the next chunk.

    Destination buffers must be C-contiguous.  A NumPy array in Fortran order or a strided view raises ValueError.

    Because this is an io.RawIOBase, everything built on readinto() is available: read(), readall(), readline(),
    iteration, wrapping in an io.BufferedReader, or passing it to shutil.copyfileobj().

    A producer that returns an empty chunk is breaking its contract.  Rather than reporting a premature end of
    stream, the reader quietly asks it for another chunk.  A read into a non-empty buffer therefore only returns 0
    once the producer has returned None.
    """
    def __init__(self, producer):
        """Construct a ChunkBufferedReader.

        Parameters
        ----------
        producer : callable
            the function from which data will be read
        """
        super().__init__()
        self._producer = producer
        self._chunk = _EMPTY
        self._offset = 0
        self._exhausted = False

    @property
    def exhausted(self):
        """True once the producer has signaled the end of the stream, or the reader has been closed."""
        return self._exhausted

    def readable(self):
        """Return True.  Raises ValueError if the reader is closed."""
        self._checkOpen()
        return True

    def readinto(self, b):
        """Read data into b.  This is identical to fill()."""
        return self.fill(b)

    def fill(self, dst):
        """Read data from the producer.

        Data is taken from a single source on each call: either whatever is left over from the previous chunk, or a
        single new chunk.  The buffer may therefore be only partially filled even though more data is available.  Use
        fillBuffer() to fill it completely.

        Parameters
        ----------
        dst : writable bytes-like object
            a buffer to hold the data.  It must be C-contiguous; a NumPy array in Fortran order or a strided view
            raises ValueError.

        Returns
        -------
        count : int
            the number of bytes written to the start of dst.  0 means the end of the stream has been reached (or dst
            is empty).
        """
        self._checkOpen()
        with memoryview(dst) as raw:
            _checkContiguous(raw)
            with raw.cast('B') as view:
                if len(view) == 0:
                    return 0
                return self._fillView(view)

    def _checkOpen(self):
        if self.closed:
            raise ValueError('I/O operation on closed file.')

    def _fillView(self, view):
        while self._offset == len(self._chunk):
            if self._exhausted:
                return 0
            # The producer may reuse the object it returned last time.
            self._chunk = _EMPTY
            self._offset = 0
            chunk = self._producer()
            if chunk is None:
                logger.debug('Producer %r reached the end of the stream', self._producer)
                self._exhausted = True
                self._producer = None
                return 0
            chunk = asByteView(chunk)
            if len(chunk) == 0:
                logger.debug('Producer %r returned an empty chunk, requesting another', self._producer)
                chunk.release()
                continue
            self._chunk = chunk
        count = min(len(view), len(self._chunk)-self._offset)
        view[:count] = self._chunk[self._offset:self._offset+count]
        self._offset += count
        return count

    def fillBuffer(self, buffer):
        """Read data from the producer until a buffer is full.

        Unlike fill(), this keeps requesting new chunks until the buffer is full or the stream ends.

        Parameters
        ----------
        buffer : writable bytes-like object
            a buffer to hold the data.  It may be a NumPy array of any type, in which case its raw bytes are filled.
            It must be C-contiguous; a NumPy array in Fortran order or a strided view raises ValueError.

        Returns
        -------
        count : int
            the number of bytes written to the start of buffer.  This is less than the size of the buffer only if the
            end of the stream was reached.
        """
        self._checkOpen()
        pos = 0
        with memoryview(buffer) as raw:
            _checkContiguous(raw)
            with raw.cast('B') as view:
                while pos < len(view):
                    count = self.fill(view[pos:])
                    if count == 0:
                        break
                    pos += count
        return pos

    def close(self):
        """Close the reader, releasing the producer and any data not yet read."""
        if not self.closed:
            self._producer = None
            self._chunk = _EMPTY
            self._offset = 0
            self._exhausted = True
        super().close()
