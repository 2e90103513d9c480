import os
import select
import signal
import threading

import pysigset

from .syscalls import restart_syscall, safe_syscall, set_nonblocking


SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def signal_name(signo):
    try:
        return signal.Signals(signo).name
    except ValueError:
        return 'signal %d' % signo


class ShutdownSignal(object):
    """
    One-shot transition from running to stopping.

    Blocking calls never wait on a socket alone: they select on the
    socket and on the read end of a self-pipe, and a shutdown request
    writes a byte to that pipe.  The byte is never drained, so once
    requested every later wait returns immediately.

    request_shutdown is safe to call from a signal handler and from
    other threads.  It does not log: the connection loop reports the
    request once it notices it (see `reason`).
    """

    def __init__(self):
        self.pipe_select, self.pipe_signal = set_nonblocking(*os.pipe())
        self.requested = False
        self.reason = None
        self._once = threading.Lock()

    def request_shutdown(self, signo=None, frame=None):
        # never released; only the first request gets through
        if not self._once.acquire(False):
            return
        self.reason = ('shutdown request' if signo is None
                       else signal_name(signo))
        self.requested = True
        if self.pipe_signal is not None:
            safe_syscall(os.write, self.pipe_signal, b'\x00')

    def should_continue(self):
        return not self.requested

    def wait(self, sock, writable=False):
        """
        Block until `sock` is ready or shutdown is requested.  Returns
        True when the socket is ready, False when we should stop.
        """
        if self.requested:
            return False
        readers = [self.pipe_select]
        writers = []
        if writable:
            writers.append(sock)
        else:
            readers.append(sock)
        read, _, _ = restart_syscall(select.select, readers, writers, [])
        return self.pipe_select not in read

    def sleep(self, seconds):
        """
        Pause for `seconds` unless shutdown is requested first.  Returns
        True when the full pause elapsed.
        """
        if self.requested:
            return False
        read, _, _ = restart_syscall(select.select, [self.pipe_select],
                                     [], [], seconds)
        return not read

    def wait_readable(self, sock):
        return self.wait(sock)

    def wait_writable(self, sock):
        return self.wait(sock, writable=True)

    def install(self, signos=SHUTDOWN_SIGNALS):
        with pysigset.suspended_signals(*signos):
            return dict((signo, signal.signal(signo, self.request_shutdown))
                        for signo in signos)

    def close(self):
        for attr in ('pipe_signal', 'pipe_select'):
            fd = getattr(self, attr)
            if fd is not None:
                setattr(self, attr, None)
                os.close(fd)
