# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from setuptools import setup


setup(
  name='stdio-monitor',
  version='0.1.0',
  description='Run a command, duplicating its stdin, stdout and stderr traffic to log files.',

  packages=['stdmon', 'utest'],
  python_requires='>=3.10',
  entry_points={'console_scripts': ['stdio-monitor=stdmon.__main__:main']},
)
