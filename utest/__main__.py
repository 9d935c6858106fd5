#!/usr/bin/env python3
# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from argparse import ArgumentParser
from os import environ, getcwd, makedirs, walk
from os.path import abspath, isfile, join as path_join
from sys import executable
from typing import Iterator

from stdmon.task import launch


def main() -> None:
  arg_parser = ArgumentParser(description='Find and run utest unit tests with the extension ".ut.py", defaulting to "test/".')
  arg_parser.add_argument('paths', nargs='*', default=['test'])
  args = arg_parser.parse_args()

  env = dict(environ)
  env.setdefault('UTEST_WORK_DIR', getcwd())

  utest_cwd = '_build/_utest'
  makedirs(utest_cwd, exist_ok=True)
  ok = True
  for path in walk_tests(args.paths):
    print(path, flush=True)
    proc = launch([executable, abspath(path)], cwd=utest_cwd, env=env, stdin=None, out=None, err=None)
    if proc.wait() != 0:
      ok = False
      print()

  exit(0 if ok else 1)


def walk_tests(paths:list[str]) -> Iterator[str]:
  for path in paths:
    if isfile(path):
      yield path
      continue
    for dir_path, dir_names, file_names in walk(path):
      dir_names.sort()
      for name in sorted(file_names):
        if name.endswith('.ut.py'): yield path_join(dir_path, name)


if __name__ == '__main__': main()
