import errno
import fcntl
import os


def set_nonblocking(*fds):
    for fd in fds:
        flags = fcntl.fcntl(fd, fcntl.F_GETFL)
        fcntl.fcntl(fd, fcntl.F_SETFL, flags | os.O_NONBLOCK)
    return fds


def _ignore_interrupts(e):
    en = getattr(e, 'errno', None)
    if en is None:
        try:
            en, _ = e.args
        except ValueError:
            # This can happen in certain cases where the error only
            # has one piece
            raise e
    if en not in (errno.EINTR, errno.EAGAIN):
        raise e


def safe_syscall(func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except Exception as e:
        _ignore_interrupts(e)


def restart_syscall(func, *args, **kwargs):
    while True:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            _ignore_interrupts(e)
