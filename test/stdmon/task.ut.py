# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from os import chdir, chmod, mkdir, symlink
from sys import executable
from tempfile import mkdtemp

from stdmon.task import (fmt_cmd, launch, norm_cmd, SpawnFileHashbangIllFormed, SpawnFileHashbangMissing,
  SpawnFileInvokedAsInstalledCommand, SpawnFileNotExecutable, SpawnFileNotFound, SpawnInstalledCommandNotFound, SpawnNotAFile)
from utest import utest, utest_exc


utest(('echo', 'a b', 'c'), norm_cmd, "echo 'a b' c")
utest(('echo', 'x'), norm_cmd, ['echo', 'x'])
utest((), norm_cmd, '')

utest("echo 'a b' c", fmt_cmd, ['echo', 'a b', 'c'])
utest("printf '%s\\n' ''", fmt_cmd, ['printf', '%s\\n', ''])


def launch_code(cmd:list[str]) -> int:
  return launch(cmd, stdin=None, out=None, err=None).wait()

utest(0, launch_code, [executable, '-c', 'pass'])
utest(3, launch_code, [executable, '-c', 'exit(3)'])

# By default all three streams are piped.
def launch_default_echo(data:bytes) -> tuple[bytes, bytes]:
  return launch([executable, '-c', 'import sys; sys.stdout.write(sys.stdin.read())']).communicate(data)

utest((b'piped', b''), launch_default_echo, b'piped')


chdir(mkdtemp(prefix='stdmon-task-'))

def touch(path:str) -> None:
  with open(path, 'wb'): pass

utest_exc(SpawnInstalledCommandNotFound('nonexistent'), launch, 'nonexistent')

utest_exc(SpawnFileNotFound('./nonexistent'), launch, './nonexistent')

mkdir('dir')
symlink('dir', 'dir.link')
utest_exc(SpawnNotAFile('./dir'), launch, './dir')
utest_exc(SpawnNotAFile('./dir.link'), launch, './dir.link')

touch('empty.py')
symlink('empty.py', 'empty.link')

utest_exc(SpawnFileInvokedAsInstalledCommand('empty.py'), launch, 'empty.py')
utest_exc(SpawnFileInvokedAsInstalledCommand('empty.link'), launch, 'empty.link')

chmod('empty.py', 0o600)
utest_exc(SpawnFileNotExecutable('./empty.py'), launch, './empty.py')
utest_exc(SpawnFileNotExecutable('./empty.link'), launch, './empty.link')

chmod('empty.py', 0o700)
utest_exc(SpawnFileHashbangMissing('./empty.py', b''), launch, './empty.py')
utest_exc(SpawnFileHashbangMissing('./empty.link', b''), launch, './empty.link')

with open('hashbang-missing.py', 'w') as f:
  f.write('xyz\n')
chmod('hashbang-missing.py', 0o700)
utest_exc(SpawnFileHashbangMissing('./hashbang-missing.py', b'xyz'), launch, './hashbang-missing.py')

with open('hashbang-ill-formed.py', 'w') as f:
  f.write('#!xyz\n')
chmod('hashbang-ill-formed.py', 0o700)
utest_exc(SpawnFileHashbangIllFormed('./hashbang-ill-formed.py', b'#!xyz'), launch, './hashbang-ill-formed.py')

# Interaction between parent process cwd and task cwd.
touch('dir/inner.py')
utest_exc(SpawnFileNotExecutable('dir/inner.py'), launch, 'dir/inner.py')
utest_exc(SpawnFileInvokedAsInstalledCommand('dir/inner.py'), launch, 'inner.py', cwd='dir')
