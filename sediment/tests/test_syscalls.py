import errno
import fcntl
import os
import tempfile

import pytest

from sediment import syscalls


def test_set_nonblocking():
    f = tempfile.TemporaryFile()
    flags = fcntl.fcntl(f, fcntl.F_GETFL)
    assert (flags | os.O_NONBLOCK) != flags
    syscalls.set_nonblocking(f.fileno())
    flags = fcntl.fcntl(f, fcntl.F_GETFL)
    assert (flags | os.O_NONBLOCK) == flags

    f.close()


def test_ignore_interrupts():
    """
    Make sure that we ignore interruption errors
    """

    with pytest.raises(AssertionError):
        syscalls._ignore_interrupts(AssertionError())
    with pytest.raises(AssertionError):
        a = AssertionError('Hello, how are you?', 'I am fine')
        syscalls._ignore_interrupts(a)
    with pytest.raises(OSError):
        syscalls._ignore_interrupts(OSError(errno.EBADF, 'Bad'))

    syscalls._ignore_interrupts(AssertionError(errno.EINTR, 'Happy'))
    syscalls._ignore_interrupts(OSError(errno.EAGAIN, 'Happy'))
    syscalls._ignore_interrupts(InterruptedError(errno.EINTR, 'Happy'))


def test_restart_syscall():
    calls = []

    def interrupted_twice():
        calls.append(None)
        if len(calls) < 3:
            raise InterruptedError(errno.EINTR, 'Interrupted system call')
        return 'done'

    assert syscalls.restart_syscall(interrupted_twice) == 'done'
    assert len(calls) == 3


def test_safe_syscall():
    def would_block():
        raise BlockingIOError(errno.EAGAIN, 'Resource unavailable')

    assert syscalls.safe_syscall(would_block) is None
    assert syscalls.safe_syscall(lambda x: x * 2, 2) == 4
