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
Run the `settee` unit tests and doctests.
"""

import sys
from unittest import TestLoader, TestSuite, TextTestRunner
from doctest import DocTestSuite

import settee


pynames = (
    'settee.tests.test_response',
    'settee.tests.test_settee',
)


def run_tests():
    suite = TestSuite()
    loader = TestLoader()
    suite.addTests(loader.loadTestsFromNames(pynames))
    for mod in ('settee', 'settee.response'):
        suite.addTest(DocTestSuite(mod))
    runner = TextTestRunner(verbosity=2)
    result = runner.run(suite)
    print('settee: {!r}'.format(settee.__file__))
    return result.wasSuccessful()


if __name__ == '__main__':
    if not run_tests():
        raise SystemExit('2')
