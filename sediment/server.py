import argparse
import errno
import os
import socket
import sys

from . import daemonize as daemon
from .accumulator import PacketBuffer, receive_packet
from .log import log, DEBUG, ERR, INFO
from .responder import send_all
from .signals import ShutdownSignal
from .store import AppendStore


# accept() failures that only mean "try again"
RETRY_ACCEPT = (errno.EINTR, errno.EAGAIN, errno.EWOULDBLOCK,
                errno.ECONNABORTED)

# pause after any other accept() failure, e.g. EMFILE, so a listener
# that stays readable cannot spin the loop
ACCEPT_BACKOFF = .5


class StartupError(Exception):
    pass


class Service(object):
    BACKLOG = 10
    HOST = ''
    PORT = 9000

    def __init__(self, host=None, port=None, store=None, shutdown=None):
        self.host = self.HOST if host is None else host
        self.port = self.PORT if port is None else port
        self.store = AppendStore() if store is None else store
        self.shutdown = ShutdownSignal() if shutdown is None else shutdown
        self.accept_backoff = ACCEPT_BACKOFF

        self.listener = None
        self.connection = None
        self.peer = None
        self.packet = None
        self.state = None
        self.torn_down = False

        self.operations = {'accepting': self.accept,
                           'receiving': self.receive,
                           'appending': self.append,
                           'responding': self.respond,
                           'closing': self.close_connection}

    @property
    def address(self):
        return self.listener.getsockname()

    def bind(self):
        try:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                self.host or None, self.port, socket.AF_INET,
                socket.SOCK_STREAM, 0, socket.AI_PASSIVE)[0]
        except socket.gaierror as e:
            raise StartupError('getaddrinfo failed: %s' % e.strerror)

        try:
            self.listener = socket.socket(family, socktype, proto)
        except OSError as e:
            raise StartupError('socket creation failed: %s' % e.strerror)

        try:
            self.listener.setsockopt(socket.SOL_SOCKET,
                                     socket.SO_REUSEADDR, 1)
            self.listener.bind(sockaddr)
        except OSError as e:
            self.listener.close()
            self.listener = None
            raise StartupError('bind failed: %s' % e.strerror)

    def listen(self):
        try:
            self.listener.listen(self.BACKLOG)
        except OSError as e:
            raise StartupError('listen failed: %s' % e.strerror)
        # readiness comes from select; a client that vanishes between
        # select and accept must not leave us blocked
        self.listener.setblocking(False)
        log(INFO, 'Listening on %s:%d' % self.address)

    def daemonize(self):
        # the data log is opened by absolute path on every access
        self.store.path = os.path.abspath(self.store.path)
        try:
            daemon.daemonize()
        except OSError as e:
            raise StartupError('daemonize failed: %s' % e.strerror)

    def run(self, daemonize=False):
        self.bind()
        if daemonize:
            self.daemonize()
        try:
            self.listen()
            self.serve()
        finally:
            self.teardown()

    def serve(self):
        self.state = 'accepting'
        while self.state != 'stopped':
            self.state = self.operations[self.state]()
        log(INFO, 'Caught %s, exiting' % self.shutdown.reason)

    def accept(self):
        if not self.shutdown.wait_readable(self.listener):
            return 'stopped'
        try:
            self.connection, address = self.listener.accept()
        except OSError as e:
            if e.errno not in RETRY_ACCEPT:
                log(ERR, 'accept failed: %s' % e.strerror)
                if not self.shutdown.sleep(self.accept_backoff):
                    return 'stopped'
            return 'accepting'
        self.connection.setblocking(True)
        self.peer = address[0]
        log(INFO, 'Accepted connection from %s' % self.peer)
        return 'receiving'

    def receive(self):
        buffer = PacketBuffer()
        result = receive_packet(self.connection, self.shutdown, buffer)
        if result.error is not None:
            log(ERR, 'recv failed from %s: %s' % (self.peer,
                                                  result.error.strerror))
        if not result.complete:
            if len(buffer):
                log(DEBUG, 'Dropping %d bytes of unterminated packet from %s'
                    % (len(buffer), self.peer))
            return 'closing'
        if len(buffer):
            log(DEBUG, 'Dropping %d bytes after the delimiter from %s'
                % (len(buffer), self.peer))
        self.packet = result.packet
        return 'appending'

    def append(self):
        packet, self.packet = self.packet, None
        try:
            self.store.append(packet)
        except OSError as e:
            log(ERR, 'Failed to append to %s: %s' % (self.store.path,
                                                     e.strerror))
            return 'closing'
        return 'responding'

    def respond(self):
        send_all(self.connection, self.store, self.shutdown, peer=self.peer)
        return 'closing'

    def close_connection(self):
        self.connection.close()
        log(INFO, 'Closed connection from %s' % self.peer)
        self.connection = None
        self.peer = None
        if self.shutdown.should_continue():
            return 'accepting'
        return 'stopped'

    def teardown(self):
        if self.torn_down:
            return
        self.torn_down = True

        if self.connection is not None:
            self.connection.close()
            self.connection = None
        if self.listener is not None:
            self.listener.close()
            self.listener = None
        try:
            self.store.remove()
        except OSError as e:
            log(ERR, 'Failed to remove %s: %s' % (self.store.path,
                                                  e.strerror))
        self.shutdown.close()
        self.state = 'stopped'


def is_daemon_requested(args):
    return args.daemon


argument_parser = argparse.ArgumentParser(
    description='Append newline-terminated packets received on TCP port'
    ' %d to %s and answer each one with the whole file.'
    % (Service.PORT, AppendStore().path))
argument_parser.add_argument('--daemon', '-d',
                             action='store_true',
                             default=False,
                             help='run in the background')


def main(argv=None):
    args = argument_parser.parse_args(argv)
    service = Service()
    service.shutdown.install()
    try:
        service.run(daemonize=is_daemon_requested(args))
    except StartupError as e:
        log(ERR, str(e))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
