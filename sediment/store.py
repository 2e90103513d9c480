import errno
import os


DATA_PATH = '/var/tmp/aesdsocketdata'
MODE = 0o644


def open_append_fd(path, mode=MODE):
    return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, mode)


def write_all(fd, data, write=os.write):
    view = memoryview(data)
    while view:
        view = view[write(fd, view):]


class AppendStore(object):
    """
    The on-disk log.  Every operation opens and closes its own handle,
    so nothing is cached between connections.
    """

    def __init__(self, path=DATA_PATH, mode=MODE, fsync=True):
        self.path = path
        self.mode = mode
        self.fsync = fsync

    def append(self, data):
        fd = open_append_fd(self.path, self.mode)
        try:
            write_all(fd, data)
            if self.fsync:
                os.fsync(fd)
        finally:
            os.close(fd)
        return len(data)

    def open(self):
        return open(self.path, 'rb')

    def read(self):
        with self.open() as f:
            return f.read()

    def exists(self):
        return os.path.isfile(self.path)

    def remove(self):
        try:
            os.unlink(self.path)
        except OSError as e:
            if e.errno != errno.ENOENT:
                raise
            return False
        return True
