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

"""Ready-made producers for use with ChunkBufferedReader.

A producer is any function taking no arguments that returns the next chunk of data, or None when there is no more.
The classes in this module are callable objects following that contract.
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)


class Chunks(object):
    """A producer that returns the items of an iterable, one per call.

    This is the simplest way to read from a list of byte strings, a generator, or any other source that already
    produces its data in pieces.
    """
    def __init__(self, iterable):
        """Construct a Chunks producer.

        Parameters
        ----------
        iterable : iterable of bytes-like objects
            the chunks to return
        """
        self._iterator = iter(iterable)

    def __call__(self):
        """Get the next chunk.

        Returns
        -------
        output : bytes-like object
            the next item of the iterable, or None if it has no more items
        """
        return next(self._iterator, None)


class Sample(object):
    """A producer that hands out a fixed block of data in pieces.

    Attributes
    ----------
    data : NumPy array
        the data to output
    blockSize : int
        the maximum number of elements to return on each call
    """
    def __init__(self, data, blockSize=512):
        """Construct a Sample producer.

        Parameters
        ----------
        data : NumPy array or bytes-like object
            the data to output.  Anything other than a NumPy array is treated as raw bytes.
        blockSize : int
            the maximum number of elements to return on each call
        """
        if blockSize < 1:
            raise ValueError('blockSize must be at least 1, got %r' % (blockSize,))
        if isinstance(data, np.ndarray):
            self.data = np.ascontiguousarray(data).reshape(-1)
        else:
            self.data = np.frombuffer(data, np.uint8)
        self.blockSize = blockSize
        self._offset = 0

    def __call__(self):
        """Get the next block of data.

        Returns
        -------
        output : NumPy array
            a view of the next block of data, or None if all of it has been returned
        """
        if self._offset < len(self.data):
            start = self._offset
            end = min(self._offset+self.blockSize, len(self.data))
            self._offset = end
            return self.data[start:end]
        return None


class Noise(object):
    """A producer that outputs an endless stream of random bytes.

    Attributes
    ----------
    blockSize : int
        the number of bytes to return on each call
    """
    def __init__(self, blockSize=512, seed=None):
        """Construct a Noise producer.

        Parameters
        ----------
        blockSize : int
            the number of bytes to return on each call
        seed : int
            the seed for the random number generator.  If None, fresh entropy is taken from the operating system.
        """
        if blockSize < 1:
            raise ValueError('blockSize must be at least 1, got %r' % (blockSize,))
        self.blockSize = blockSize
        self._random = np.random.default_rng(seed)

    def __call__(self):
        """Get the next block of random bytes.

        Returns
        -------
        output : bytes
            blockSize random bytes
        """
        return self._random.bytes(self.blockSize)


class Concatenate(object):
    """A producer whose output is the output of each of its inputs, one after another."""
    def __init__(self, *inputs):
        """Construct a Concatenate producer.

        Parameters
        ----------
        inputs : producers
            the producers to read from, in order
        """
        self._inputs = list(inputs)

    def __call__(self):
        """Get the next chunk.

        Returns
        -------
        output : bytes-like object
            the next chunk from the first input that has not yet ended, or None if all of them have
        """
        while len(self._inputs) > 0:
            chunk = self._inputs[0]()
            if chunk is not None:
                return chunk
            logger.debug('Input %r ended, %d remaining', self._inputs[0], len(self._inputs)-1)
            del self._inputs[0]
        return None
