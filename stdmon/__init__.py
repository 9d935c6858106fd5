# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
stdio-monitor runs a command and duplicates each of its standard streams to a log sink.
'''

from .config import ConfigError, MonitorConfig
from .monitor import EXIT_CHILD_FAILED, InvalidCommand, Monitor, MonitorState, MonitorStateError, run
from .sink import FileSink, open_sink, resolve_sink, Sink, SinkOpenError, StreamSink
from .task import fmt_cmd, launch, SpawnError
from .tee import CHUNK_SIZE, duplicate, TeeError, TeeThread
