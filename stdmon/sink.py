# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Sinks: writable destinations for duplicated stream bytes.
A sink has one capability, `write`, which writes a whole chunk and flushes it.
'''

from _thread import LockType
from functools import cache
from sys import stderr, stdout
from threading import Lock
from typing import BinaryIO

from .io import std_err_lock, write_all


class SinkOpenError(Exception):
  'Raised when a log destination cannot be opened for writing.'

  def __init__(self, path:str, cause:OSError) -> None:
    super().__init__(path, cause)
    self.path = path
    self.cause = cause

  def __str__(self) -> str:
    return f'could not open log file: {self.path!r}: {self.cause.strerror or self.cause}'


class Sink:

  name = '<sink>'

  def write(self, chunk:bytes) -> None:
    'Write all of `chunk` and flush.'
    raise NotImplementedError

  def close(self) -> None: pass

  def __repr__(self) -> str: return f'{type(self).__name__}({self.name!r})'


class FileSink(Sink):
  '''
  A sink that owns its file: either a file opened for logging or the parent end of a pipe.
  Closing the sink closes the file.
  '''

  def __init__(self, file:BinaryIO, name:str) -> None:
    self.file = file
    self.name = name

  def write(self, chunk:bytes) -> None:
    write_all(self.file, chunk)

  def close(self) -> None:
    self.file.close()


class StreamSink(Sink):
  '''
  A sink that wraps a stream it does not own, such as the process std out or std err.
  Writes are serialized by `lock`, so that several tasks can share the sink without interleaving within a chunk.
  '''

  def __init__(self, stream:BinaryIO, name:str, lock:LockType|None=None) -> None:
    self.stream = stream
    self.name = name
    self.lock = Lock() if lock is None else lock

  def write(self, chunk:bytes) -> None:
    with self.lock:
      write_all(self.stream, chunk)


@cache
def std_err_sink() -> StreamSink:
  'The process-wide default sink; shares its lock with the diagnostic printers in `stdmon.io`.'
  return StreamSink(stderr.buffer, name='<stderr>', lock=std_err_lock)


@cache
def std_out_sink() -> StreamSink:
  return StreamSink(stdout.buffer, name='<stdout>')


def open_sink(path:str) -> FileSink:
  'Open `path` for writing, truncating any existing content.'
  try: f = open(path, 'wb')
  except OSError as e: raise SinkOpenError(path, e) from e
  return FileSink(f, name=path)


def resolve_sink(path:str|None, default:Sink|None=None) -> Sink:
  '''
  Resolve a log destination to a sink.
  If `path` is None or empty, return `default`, or the shared std err sink if `default` is not provided.
  '''
  if path: return open_sink(path)
  return std_err_sink() if default is None else default
