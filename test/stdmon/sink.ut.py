# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from io import BytesIO
from os import chdir
from tempfile import mkdtemp
from threading import Lock, Thread

from stdmon.io import std_err_lock
from stdmon.sink import FileSink, open_sink, resolve_sink, SinkOpenError, std_err_sink, StreamSink
from utest import utest, utest_exc, utest_val


chdir(mkdtemp(prefix='stdmon-sink-'))


def read_path(path:str) -> bytes:
  with open(path, 'rb') as f: return f.read()


# Default directives resolve to the shared std err sink, or to the provided default.
utest_val(True, resolve_sink(None) is std_err_sink(), 'None resolves to std err')
utest_val(True, resolve_sink('') is std_err_sink(), 'empty path resolves to std err')
default = StreamSink(BytesIO(), 'default')
utest_val(True, resolve_sink(None, default=default) is default, 'explicit default')

# Stream sinks take an explicit lock, or make their own; the std err sink shares the diagnostics lock.
lock = Lock()
utest_val(True, StreamSink(BytesIO(), 'locked', lock=lock).lock is lock, 'explicit lock')
utest_val(False, StreamSink(BytesIO(), 'a').lock is StreamSink(BytesIO(), 'b').lock, 'own locks')
utest_val(True, std_err_sink().lock is std_err_lock, 'std err lock shared')

# Path directives open files, truncating existing content.
with open('existing.log', 'wb') as f: f.write(b'old content that is longer')
sink = resolve_sink('existing.log')
utest_val(True, isinstance(sink, FileSink), 'path resolves to file sink')
sink.write(b'new')
sink.close()
utest(b'new', read_path, 'existing.log')

sink = open_sink('fresh.log')
sink.write(b'a')
sink.write(b'b')
utest(b'ab', read_path, 'fresh.log') # Each write is flushed.
sink.close()

utest_exc(SinkOpenError, open_sink, 'missing-dir/x.log')
utest_exc(SinkOpenError, resolve_sink, '.') # A directory.

try: open_sink('missing-dir/x.log')
except SinkOpenError as e:
  utest_val('missing-dir/x.log', e.path, 'error path')
  utest_val(True, isinstance(e.cause, FileNotFoundError), 'error cause')


# Concurrent writers to a shared stream sink never interleave within a chunk.
buffer = BytesIO()
shared = StreamSink(buffer, 'shared')
chunks = [bytes([65 + i]) * 4096 for i in range(4)]

def write_many(chunk:bytes) -> None:
  for _ in range(50): shared.write(chunk)

threads = [Thread(target=write_many, args=(c,)) for c in chunks]
for t in threads: t.start()
for t in threads: t.join()

data = buffer.getvalue()
utest_val(4 * 50 * 4096, len(data), 'shared total')
utest_val(True, all(data[i:i+4096] in chunks for i in range(0, len(data), 4096)), 'chunks intact')
