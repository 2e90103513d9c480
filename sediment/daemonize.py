import os
import sys


def _detach_stdio():
    fd = os.open(os.devnull, os.O_RDWR)
    for target in (0, 1, 2):
        os.dup2(fd, target)
    if fd > 2:
        os.close(fd)


def daemonize():
    """
    Detach from the controlling terminal.  Only the final grandchild
    returns; the original process and the intermediate child leave
    through os._exit so no cleanup of the caller runs twice.

    Diagnostics keep flowing through syslog once stdio is gone.
    """
    sys.stdout.flush()
    sys.stderr.flush()

    # for steps see TLPI 37.2
    if os.fork():
        # 1
        os._exit(0)
    # 2
    os.setsid()
    # 3
    if os.fork():
        os._exit(0)
    # 4
    os.umask(0)
    # 5
    os.chdir('/')
    # 6/7
    _detach_stdio()
