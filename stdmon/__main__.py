# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from argparse import ArgumentParser, REMAINDER
from dataclasses import replace
from os import environ
from typing import NoReturn

from .config import ConfigError, MonitorConfig
from .io import errL
from .monitor import InvalidCommand, Monitor
from .sink import SinkOpenError
from .task import fmt_cmd, SpawnError
from .tee import TeeError


def main() -> None:
  parser = ArgumentParser(prog='stdio-monitor',
    description='Run a command, logging the traffic on its stdin, stdout and stderr.',
    usage='%(prog)s [OPTIONS] [--] COMMAND [ARGS...]')
  parser.add_argument('--stdin', help='Path to log stdin traffic; defaults to stderr.')
  parser.add_argument('--stdout', help='Path to log stdout traffic; defaults to stderr.')
  parser.add_argument('--stderr', help='Path to log stderr traffic; defaults to stderr.')
  parser.add_argument('--pass-code', action='store_true', default=None,
    help='Exit with the command exit code, rather than 255 for any failure.')
  parser.add_argument('--quiet', action='store_true', default=None, help='Do not announce the command.')
  parser.add_argument('--chunk-size', type=int, help='Read size for each stream copy.')
  parser.add_argument('cmd', nargs=REMAINDER, metavar='COMMAND', help='The command to run, with its arguments.')
  args = parser.parse_args()

  cmd = args.cmd
  if cmd[:1] == ['--']: cmd = cmd[1:]
  if not cmd: parser.error('the following arguments are required: COMMAND')

  try:
    config = MonitorConfig.from_env(environ)
    overrides = dict(stdin_log=args.stdin, stdout_log=args.stdout, stderr_log=args.stderr, pass_code=args.pass_code,
      quiet=args.quiet, chunk_size=args.chunk_size)
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
  except ConfigError as e: fail(f'configuration error: {e}')

  try: code = Monitor(cmd, config=config).run()
  except InvalidCommand as e: fail(str(e))
  except SinkOpenError as e: fail(str(e))
  except SpawnError as e: fail(f'could not launch: {fmt_cmd(cmd)}\n  {e.path}: {e.diagnosis}')
  except TeeError as e: fail(str(e))
  exit(code)


def fail(msg:str) -> NoReturn:
  errL('stdio-monitor: error: ', msg)
  exit(1)


if __name__ == '__main__': main()
