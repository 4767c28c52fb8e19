# Copyright (c) 2026 NASK. All rights reserved.

import collections
import logging
import os.path
import sys


TOPLEVEL_PACKAGES = frozenset({'formbind'})


def get_logger(name=None):
    """
    Like logging.getLogger(...) but replacing '__main__' with a sensible name.

    For example, if the script path is '/whatever/formbind/tools/foo.py'
    get_logger('__main__') is equivalent to logging.getLogger('formbind.tools.foo').

    Note that *formbind* never configures logging by itself: handlers,
    levels and formatters are the business of the hosting application
    (typically, the `[logger_*]` sections of its Pyramid *.ini* file).
    """
    if name == '__main__':
        # try to get the script path from __main__.__file__
        script_path = getattr(sys.modules['__main__'], '__file__', None)
        if not script_path:
            # or, if __main__ does not have a non-blank __file__ attribute,
            # extract the script path from sys.argv...
            script_path = sys.argv[0]
        # strip off the filename extension...
        remaining = os.path.splitext(script_path)[0]
        # ..and pop path name segments up to
        # (and including) the toplevel package name
        aggregated_segments = collections.deque()
        while True:
            remaining, segment = os.path.split(remaining)
            segment = segment.replace('.', 'D')  # just in case of '.' or '..'
            aggregated_segments.appendleft(segment)
            if segment in TOPLEVEL_PACKAGES or remaining in ('', '/'):
                break
        name = '.'.join(aggregated_segments)
    return logging.getLogger(name)
