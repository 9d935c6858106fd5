# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from sys import stderr
from threading import Lock
from typing import Any, BinaryIO


# Serializes everything written to the process std err: diagnostics and the default log sink.
std_err_lock = Lock()


def errL(*items:Any, sep='') -> None:
  "Write `items` to std err and flush; sep='', end='\\n'."
  with std_err_lock:
    print(*items, sep=sep, file=stderr, flush=True)


def write_all(file:BinaryIO, data:bytes) -> None:
  '''
  Write all of `data` to `file`, then flush.
  Raw (unbuffered) files may accept fewer bytes than requested; keep writing the remainder.
  '''
  view = memoryview(data)
  while view:
    n = file.write(view)
    if n is None: raise BlockingIOError(f'write to non-blocking file would block: {file!r}')
    view = view[n:]
  file.flush()
