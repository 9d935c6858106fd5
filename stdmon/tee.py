# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Duplicate a byte stream to a primary sink and a log sink.
'''

from threading import Thread
from typing import BinaryIO, Iterable

from .sink import Sink


CHUNK_SIZE = 1024


class TeeError(Exception):
  'Raised when joining a duplication thread whose copy loop failed; chained from the underlying error.'

  def __init__(self, stream_name:str) -> None:
    super().__init__(stream_name)
    self.stream_name = stream_name

  def __str__(self) -> str:
    return f'{self.stream_name} forwarding failed: {self.__cause__}'


def duplicate(source:BinaryIO, primary:Sink, log:Sink|None=None, chunk_size=CHUNK_SIZE) -> int:
  '''
  Copy `source` to `primary` and `log` chunk by chunk until `source` is exhausted; return the total byte count.
  Each chunk is written and flushed to `primary`, then to `log`, before the next read.
  If `log` is None, chunks are written only to `primary`.
  Any OSError propagates immediately. Neither the source nor the sinks are closed.
  '''
  if chunk_size <= 0: raise ValueError(f'chunk_size must be positive; received {chunk_size}')
  total = 0
  while True:
    chunk = source.read(chunk_size)
    if not chunk: break
    total += len(chunk)
    primary.write(chunk)
    if log is not None: log.write(chunk)
  return total


class TeeThread(Thread):
  '''
  A thread that runs `duplicate` once.
  The result or failure is recorded on the thread; `finish` joins and raises TeeError for a failure.
  `owned` are closed when the copy loop ends, whether it succeeded or not.
  '''

  def __init__(self, stream_name:str, source:BinaryIO, primary:Sink, log:Sink|None=None, chunk_size=CHUNK_SIZE,
   owned:Iterable[BinaryIO|Sink]=(), daemon=False) -> None:
    super().__init__(name=f'tee-{stream_name}', daemon=daemon)
    self.stream_name = stream_name
    self.source = source
    self.primary = primary
    self.log = log
    self.chunk_size = chunk_size
    self.owned = tuple(owned)
    self.total:int|None = None
    self.error:Exception|None = None

  def run(self) -> None:
    try:
      self.total = duplicate(self.source, self.primary, self.log, chunk_size=self.chunk_size)
    except Exception as e:
      self.error = e
    finally:
      for f in self.owned:
        try: f.close()
        except Exception as e:
          if self.error is None: self.error = e

  def finish(self) -> int:
    'Join the thread and return the byte count, or raise TeeError chained from the failure.'
    self.join()
    if self.error is not None: raise TeeError(self.stream_name) from self.error
    if self.total is None: raise TeeError(self.stream_name)
    return self.total
