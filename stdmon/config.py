# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from dataclasses import dataclass
from os import environ
from typing import Mapping

from .tee import CHUNK_SIZE


class ConfigError(ValueError): pass


@dataclass(frozen=True)
class MonitorConfig:
  '''
  Settings for a monitor run.
  The log paths are None for the default sink (the process std err).
  '''
  stdin_log:str|None = None
  stdout_log:str|None = None
  stderr_log:str|None = None
  chunk_size:int = CHUNK_SIZE
  quiet:bool = False
  pass_code:bool = False

  def __post_init__(self) -> None:
    if self.chunk_size <= 0: raise ConfigError(f'chunk size must be positive; received {self.chunk_size}')

  @classmethod
  def from_env(cls, env:Mapping[str,str]|None=None) -> 'MonitorConfig':
    '''
    Read defaults from the `STDMON_*` environment variables.
    An empty log path means the default sink.
    '''
    if env is None: env = environ
    chunk_size_str = env.get('STDMON_CHUNK_SIZE', '')
    if chunk_size_str:
      try: chunk_size = int(chunk_size_str)
      except ValueError: raise ConfigError(f'STDMON_CHUNK_SIZE must be an integer; received {chunk_size_str!r}') from None
    else:
      chunk_size = CHUNK_SIZE
    return cls(
      stdin_log=(env.get('STDMON_STDIN') or None),
      stdout_log=(env.get('STDMON_STDOUT') or None),
      stderr_log=(env.get('STDMON_STDERR') or None),
      chunk_size=chunk_size,
      quiet=_is_truthy(env.get('STDMON_QUIET')),
      pass_code=_is_truthy(env.get('STDMON_PASS_CODE')))


def _is_truthy(val:str|None) -> bool:
  return (val or '').strip().lower() in ('1', 'true', 'yes', 'y', 'on')
