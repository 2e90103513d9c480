import threading

import pytest

from sediment.server import Service
from sediment.store import AppendStore


class RunningService(object):

    def __init__(self, service):
        self.service = service
        self.thread = threading.Thread(target=self.service.serve)
        self.thread.daemon = True

    @property
    def port(self):
        return self.address[1]

    def start(self):
        self.service.bind()
        self.service.listen()
        # teardown clears the listener; keep the address for later checks
        self.address = self.service.address
        self.thread.start()
        return self

    def stop(self, timeout=5):
        self.service.shutdown.request_shutdown()
        self.thread.join(timeout)
        stopped = not self.thread.is_alive()
        self.service.teardown()
        return stopped


@pytest.fixture
def data_path(tmpdir):
    return str(tmpdir.join('data'))


@pytest.fixture
def running(data_path):
    service = Service(host='127.0.0.1', port=0,
                      store=AppendStore(data_path, fsync=False))
    running = RunningService(service).start()
    yield running
    running.stop()
