from collections import namedtuple


DELIMITER = b'\n'
RECV_SIZE = 1024


ReceiveResult = namedtuple('ReceiveResult', 'packet complete error')


class PacketBuffer(object):
    """
    Growable byte buffer that hands out delimiter-terminated packets.

    Bytes following the first delimiter stay buffered as the start of
    the next packet.
    """

    def __init__(self, delimiter=DELIMITER):
        self.delimiter = delimiter
        self.buffer = bytearray()
        # everything before this offset has already been searched
        self.scanned = 0

    def __len__(self):
        return len(self.buffer)

    def append(self, chunk):
        self.buffer.extend(chunk)

    def take_if_complete(self):
        index = self.buffer.find(self.delimiter, self.scanned)
        if index == -1:
            self.scanned = len(self.buffer)
            return None
        end = index + len(self.delimiter)
        packet = bytes(self.buffer[:end])
        del self.buffer[:end]
        self.scanned = 0
        return packet


def receive_packet(connection, shutdown, buffer=None, recv_size=RECV_SIZE):
    if buffer is None:
        buffer = PacketBuffer()

    while True:
        packet = buffer.take_if_complete()
        if packet is not None:
            return ReceiveResult(packet, True, None)

        try:
            if not shutdown.wait_readable(connection):
                return ReceiveResult(None, False, None)
            chunk = connection.recv(recv_size)
        except OSError as e:
            if not shutdown.should_continue():
                return ReceiveResult(None, False, None)
            return ReceiveResult(None, False, e)

        if not chunk:
            # peer went away before finishing the packet
            return ReceiveResult(None, False, None)
        buffer.append(chunk)
