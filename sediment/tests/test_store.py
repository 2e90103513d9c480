import os
import stat

import pytest

from sediment import store


def test_append_creates_and_extends(tmpdir):
    path = tmpdir.join('data')
    assert not path.check()

    s = store.AppendStore(str(path))
    assert s.append(b'hello\n') == 6
    assert path.check(file=True)
    assert stat.S_IMODE(path.stat().mode) & 0o777 == store.MODE & ~_umask()

    s.append(b'world\n')
    assert path.read_binary() == b'hello\nworld\n'
    assert s.read() == b'hello\nworld\n'


def _umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask


def test_append_never_truncates(tmpdir):
    path = tmpdir.join('data')
    path.write_binary(b'existing\n')

    store.AppendStore(str(path), fsync=False).append(b'new\n')
    assert path.read_binary() == b'existing\nnew\n'


def test_append_closes_its_handle(tmpdir):
    '''\
    No descriptor is held between appends.
    '''
    s = store.AppendStore(str(tmpdir.join('data')))
    before = len(os.listdir('/proc/self/fd'))
    for _ in range(10):
        s.append(b'x\n')
    assert len(os.listdir('/proc/self/fd')) == before


def test_append_failure(tmpdir):
    s = store.AppendStore(str(tmpdir.join('missing', 'data')))
    with pytest.raises(OSError):
        s.append(b'lost\n')
    assert not s.exists()


def test_write_all_handles_short_writes(tmpdir):
    path = tmpdir.join('data')
    fd = store.open_append_fd(str(path))
    calls = []

    def one_byte_write(fd, data):
        calls.append(bytes(data))
        return os.write(fd, data[:1])

    try:
        store.write_all(fd, b'abc\n', write=one_byte_write)
    finally:
        os.close(fd)

    assert calls == [b'abc\n', b'bc\n', b'c\n', b'\n']
    assert path.read_binary() == b'abc\n'


def test_remove(tmpdir):
    path = tmpdir.join('data')
    s = store.AppendStore(str(path))
    assert not s.remove()

    s.append(b'x\n')
    assert s.remove()
    assert not path.check()
    assert not s.remove()
