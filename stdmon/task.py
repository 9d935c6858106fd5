# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Launching child processes, with diagnosis of launch failures.
'''

from os import access as _access, R_OK, supports_effective_ids as _supports_effective_ids, X_OK
from os.path import dirname as _dir_name, exists as _path_exists, isfile as _is_file, join as _path_join
from shlex import quote as sh_quote, split as sh_split
from subprocess import PIPE, Popen as _Popen
from sys import stderr, stdout
from typing import IO, Sequence, Union


Cmd = Union[str, Sequence[str]]
Env = dict[str, str]
File = Union[None, int, IO]


def norm_cmd(cmd:Cmd) -> tuple[str, ...]:
  'Normalize `cmd` to a tuple of words; a string is split by shlex.split.'
  return tuple(sh_split(cmd) if isinstance(cmd, str) else cmd)


def fmt_cmd(cmd:Sequence[str]) -> str: return ' '.join(sh_quote(word) for word in cmd)


def launch(cmd:Cmd, cwd:str|None=None, env:Env|None=None, stdin:File=PIPE, out:File=PIPE, err:File=PIPE) -> _Popen:
  '''
  Launch a subprocess and return the subprocess.Popen object.
  By default all three standard streams are piped.

  Pipes are unbuffered: reading from a child pipe returns as soon as any bytes are available,
  rather than waiting to fill the requested size.

  If `cmd` is a list, it is used as is. If `cmd` is a string it is split by shlex.split.
  '''
  cmd = norm_cmd(cmd)

  # Flushing std file descriptors keeps parent output ahead of child output.
  stderr.flush()
  stdout.flush()

  try:
    return _Popen(cmd, cwd=cwd, env=env, stdin=stdin, stdout=out, stderr=err, shell=False, bufsize=0)

  # _Popen may raise FileNotFoundError, PermissionError, or OSError.
  # The distinction is more confusing than helpful; therefore we handle them all as OSError.
  except OSError as e:
    cmd_path_as_invoked = cmd[0] # The path as seen by the command.
    path = cmd_path_as_invoked if cwd is None else _path_join(cwd, cmd_path_as_invoked) # The cmd relative to the parent cwd, or absolute.
    if e.filename == cmd_path_as_invoked:
      _diagnose_spawn_error(path, cmd_path_as_invoked, e) # Raises a more specific exception or else return.
    raise SpawnUndiagnosedError(path) from e


def _diagnose_spawn_error(path:str, cmd_path:str, e:OSError) -> None:
  if not _dir_name(cmd_path): # invoked as installed command.
    if _path_exists(path): raise SpawnFileInvokedAsInstalledCommand(path) from e
    else: raise SpawnInstalledCommandNotFound(cmd_path) from e

  if not _path_exists(path): raise SpawnFileNotFound(path) from e
  if not _is_file(path): raise SpawnNotAFile(path) from e
  if not _is_permitted(path, X_OK): raise SpawnFileNotExecutable(path) from e

  bad_format = (e.strerror == 'Exec format error')
  if bad_format and not _is_permitted(path, R_OK): raise SpawnFileNotReadable(path) from e # Read bit is necessary for scripts.

  if bad_format or isinstance(e, FileNotFoundError):
    # The 'file not found' exception might actually be due to mistyped shebang, confusingly.
    try: # Heuristic to diagnose bad shebang lines.
      with open(path, 'rb') as f:
        lead_bytes = f.read(256) # Realistically a shebang line should not be longer than this.
    except OSError:
      raise SpawnError(path) from e
    line, newline, _ = lead_bytes.partition(b'\n')
    if line and (not newline or b'\0' in line): raise SpawnFileBinaryIllFormed(path, line) from e
    if not line.startswith(b'#!'): raise SpawnFileHashbangMissing(path, line) from e
    raise SpawnFileHashbangIllFormed(path, line) from e


def _is_permitted(path:str, mode:int) -> bool:
  return _access(path, mode, effective_ids=(_access in _supports_effective_ids))


# Exceptions.


class SpawnError(Exception):
  '''
  Exception indicating that `launch` failed.
  `launch` attempts to diagnose failures and raises a subclass of SpawnError from the original.
  '''

  def __init__(self, path:str, *args:object) -> None:
    super().__init__(path, *args)
    self.path = path

  @property
  def diagnosis(self) -> str:
    return 'launch failed.'


class SpawnUndiagnosedError(SpawnError):

  @property
  def diagnosis(self) -> str:
    return 'launch failed (undiagnosed).'


class SpawnFileBinaryIllFormed(SpawnError):

  def __init__(self, path:str, first_line:bytes) -> None:
    super().__init__(path, first_line)
    self.first_line = first_line

  @property
  def diagnosis(self) -> str:
    return f'file appears to be a binary; perhaps it is corrupt or the wrong format? first line: {_try_decode_repr(self.first_line)}'


class SpawnFileInvokedAsInstalledCommand(SpawnError):

  @property
  def diagnosis(self) -> str: return 'file exists but invocation is missing a leading `./`.'


class SpawnFileHashbangMissing(SpawnError):

  def __init__(self, path:str, first_line:bytes) -> None:
    super().__init__(path, first_line)
    self.first_line = first_line

  @property
  def diagnosis(self) -> str:
    return f'script is missing shebang line (`#!...`); first line: {_try_decode_repr(self.first_line)}'


class SpawnFileHashbangIllFormed(SpawnError):

  def __init__(self, path:str, first_line:bytes) -> None:
    super().__init__(path, first_line)
    self.first_line = first_line

  @property
  def diagnosis(self) -> str:
    return f'script shebang line may be ill-formed; first line: {_try_decode_repr(self.first_line)}'


class SpawnFileNotExecutable(SpawnError):

  @property
  def diagnosis(self) -> str: return 'file is not executable.'


class SpawnFileNotFound(SpawnError):

  @property
  def diagnosis(self) -> str: return 'file was not found.'


class SpawnFileNotReadable(SpawnError):

  @property
  def diagnosis(self) -> str: return 'file is not readable.'


class SpawnInstalledCommandNotFound(SpawnError):

  @property
  def diagnosis(self) -> str: return f'installed executable was not found: `{self.path}`'


class SpawnNotAFile(SpawnError):

  @property
  def diagnosis(self) -> str: return 'invocation path refers to a non-file.'


def _try_decode_repr(b:bytes) -> str:
  try: return repr(b.decode())
  except UnicodeError: return repr(b)
