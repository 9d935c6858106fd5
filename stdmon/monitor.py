# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Run a child process with each of its standard streams duplicated to a log sink.

The three streams are copied by three threads:
* stdin: the parent's std in to the child, and to the stdin log.
* stdout: the child to the parent's std out, and to the stdout log.
* stderr: the child to the stderr log only.

The supervisor waits for the child, then joins the stdout and stderr threads,
which end once the child's output pipes close.
The stdin thread is never joined: the parent's std in may stay open long after the child exits,
e.g. an interactive terminal. It runs as a daemon thread and is abandoned when the process exits.
'''

from dataclasses import replace
from enum import Enum
from signal import Signals
from subprocess import PIPE, Popen
from typing import BinaryIO

from .config import MonitorConfig
from .sink import FileSink, resolve_sink, Sink, std_err_sink, std_out_sink
from .task import Cmd, Env, fmt_cmd, launch, norm_cmd
from .tee import TeeThread


EXIT_CHILD_FAILED = 255


class InvalidCommand(ValueError):
  'Raised when the command to run is empty.'


class MonitorStateError(Exception):
  'Raised when a monitor is run more than once.'


class MonitorState(Enum):
  CREATED = 'created'
  SPAWNED = 'spawned'
  STREAMS_WIRED = 'streams wired'
  RUNNING = 'running'
  CHILD_EXITED = 'child exited'
  OUTPUT_JOINED = 'output joined'
  TERMINATED = 'terminated'
  FAILED = 'failed'


class Monitor:
  '''
  Supervises a single run of a child process.

  `in_file`, `out_sink` and `err_sink` stand in for the parent's own std in, std out and std err;
  by default they are the real process streams.
  `err_sink` receives diagnostics, and is the default for each log that has no path.
  '''

  def __init__(self, cmd:Cmd, config:MonitorConfig=MonitorConfig(), cwd:str|None=None, env:Env|None=None,
   in_file:BinaryIO|None=None, out_sink:Sink|None=None, err_sink:Sink|None=None) -> None:
    self.cmd = cmd
    self.config = config
    self.cwd = cwd
    self.env = env
    self.in_file = in_file
    self.out_sink = std_out_sink() if out_sink is None else out_sink
    self.err_sink = std_err_sink() if err_sink is None else err_sink
    self.state = MonitorState.CREATED
    self.proc:Popen|None = None
    self.returncode:int|None = None
    self.stdin_thread:TeeThread|None = None
    self.stdout_thread:TeeThread|None = None
    self.stderr_thread:TeeThread|None = None


  def note(self, msg:str) -> None:
    'Write a diagnostic line to the err sink.'
    self.err_sink.write(f'stdio-monitor: {msg}\n'.encode())


  def run(self) -> int:
    '''
    Run the child to completion and return the exit code for this program.
    Any failure kills the child if it is still running, moves the monitor to FAILED, and propagates.
    '''
    if self.state != MonitorState.CREATED: raise MonitorStateError(f'monitor cannot run in state: {self.state.value}')
    try:
      return self._run()
    except BaseException:
      self.state = MonitorState.FAILED
      proc = self.proc
      if proc is not None and proc.returncode is None:
        proc.kill()
        proc.wait()
      raise


  def _run(self) -> int:
    cmd = norm_cmd(self.cmd)
    if not cmd: raise InvalidCommand('command is empty')
    config = self.config
    if not config.quiet: self.note(f'launching: {fmt_cmd(cmd)}')

    proc = launch(cmd, cwd=self.cwd, env=self.env, stdin=PIPE, out=PIPE, err=PIPE)
    self.proc = proc
    self.state = MonitorState.SPAWNED
    assert proc.stdin is not None and proc.stdout is not None and proc.stderr is not None

    # Logs are opened only once the child exists, so a failed launch leaves no log files.
    logs:list[Sink] = []
    try:
      for path in (config.stdin_log, config.stdout_log, config.stderr_log):
        logs.append(resolve_sink(path, default=self.err_sink))
    except BaseException:
      for sink in logs:
        if isinstance(sink, FileSink): sink.close()
      for f in (proc.stdin, proc.stdout, proc.stderr): f.close()
      raise
    in_log, out_log, err_log = logs

    in_file = self.in_file
    if in_file is None:
      # Raw and not owned, so that an abandoned blocking read holds no buffer lock at shutdown.
      in_file = open(0, 'rb', buffering=0, closefd=False)
    child_in = FileSink(proc.stdin, name='<child stdin>')

    def owned_logs(*sinks:Sink) -> list[Sink]: return [s for s in sinks if isinstance(s, FileSink)]

    self.stdin_thread = TeeThread('stdin', in_file, child_in, in_log, chunk_size=config.chunk_size,
      owned=[child_in, *owned_logs(in_log)], daemon=True)
    self.stdout_thread = TeeThread('stdout', proc.stdout, self.out_sink, out_log, chunk_size=config.chunk_size,
      owned=[proc.stdout, *owned_logs(out_log)])
    self.stderr_thread = TeeThread('stderr', proc.stderr, err_log, chunk_size=config.chunk_size,
      owned=[proc.stderr, *owned_logs(err_log)])
    self.state = MonitorState.STREAMS_WIRED

    for thread in (self.stdin_thread, self.stdout_thread, self.stderr_thread):
      thread.start()
    self.state = MonitorState.RUNNING

    self.returncode = proc.wait()
    self.state = MonitorState.CHILD_EXITED

    self.stdout_thread.finish()
    self.stderr_thread.finish()
    self.state = MonitorState.OUTPUT_JOINED

    code = self.exit_code(self.returncode)
    self.state = MonitorState.TERMINATED
    return code


  def exit_code(self, returncode:int) -> int:
    'Map the child return code to the exit code for this program, noting any failure.'
    if returncode == 0: return 0
    if returncode < 0:
      self.note(f'program killed by signal {_signal_name(-returncode)}')
      code = 128 - returncode
    else:
      self.note(f'program exited with status {returncode}')
      code = returncode
    return code if self.config.pass_code else EXIT_CHILD_FAILED


def run(cmd:Cmd, stdin_log:str|None=None, stdout_log:str|None=None, stderr_log:str|None=None,
 config:MonitorConfig|None=None, **kwargs) -> int:
  'Run `cmd` with a fresh Monitor and return the exit code for this program.'
  if config is None: config = MonitorConfig()
  paths = dict(stdin_log=stdin_log, stdout_log=stdout_log, stderr_log=stderr_log)
  config = replace(config, **{k: v for k, v in paths.items() if v is not None})
  return Monitor(cmd, config=config, **kwargs).run()


def _signal_name(signum:int) -> str:
  try: return Signals(signum).name
  except ValueError: return str(signum)
