import os
import sys
import syslog
import time


IDENT = 'sediment'

DEBUG = 'DEBUG'
INFO = 'INFO'
WARNING = 'WARNING'
ERR = 'ERR'

PRIORITIES = {DEBUG: syslog.LOG_DEBUG,
              INFO: syslog.LOG_INFO,
              WARNING: syslog.LOG_WARNING,
              ERR: syslog.LOG_ERR}

TO_STDERR = (WARNING, ERR)

_opened = False


def format_line(level, message):
    return '%s %s[%d]: %s %s\n' % (time.strftime('%Y-%m-%dT%H:%M:%S'),
                                   IDENT, os.getpid(), level, message)


def open_syslog():
    global _opened
    syslog.openlog(IDENT, syslog.LOG_PID, syslog.LOG_USER)
    _opened = True


def log(level, message):
    if not _opened:
        open_syslog()
    syslog.syslog(PRIORITIES[level], message)

    # foreground echo; once daemonized fds 1 and 2 are /dev/null.
    # look the streams up on every call, tests swap them out
    stream = sys.stderr if level in TO_STDERR else sys.stdout
    stream.write(format_line(level, message))
    stream.flush()
