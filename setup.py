#!/usr/bin/env python3
#
# settee: a small client for a CouchDB server
# Copyright (C) 2026 The Settee Developers
#
# This file is part of `settee`.
#
# `settee` is free software: you can redistribute it and/or modify it under
# the terms of the GNU Lesser General Public License as published by the Free
# Software Foundation, either version 3 of the License, or (at your option) any
# later version.
#
# `settee` is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE.  See the GNU Lesser General Public License for more
# details.
#
# You should have received a copy of the GNU Lesser General Public License along
# with `settee`.  If not, see <http://www.gnu.org/licenses/>.
#
# Authors:
#   The Settee Developers
#

"""
Install `settee`.
"""

import sys
if sys.version_info < (3, 7):
    sys.exit('Settee requires Python 3.7 or newer')

from setuptools import setup, Command

import settee


class Test(Command):
    description = 'run unit tests and doc tests'

    user_options = [
        ('skip-all', None, 'skip all tests'),
    ]

    def initialize_options(self):
        self.skip_all = 0

    def finalize_options(self):
        pass

    def run(self):
        if self.skip_all:
            sys.exit(0)
        from settee.tests.run import run_tests
        if not run_tests():
            raise SystemExit('2')


setup(
    name='settee',
    description='a small client for a CouchDB server',
    version=settee.__version__,
    author='The Settee Developers',
    license='LGPLv3+',
    packages=['settee', 'settee.tests'],
    python_requires='>=3.7',
    extras_require={
        'test': ['pytest'],
    },
    cmdclass={'test': Test},
)
