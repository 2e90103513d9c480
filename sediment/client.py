from contextlib import closing
import socket

from .accumulator import RECV_SIZE


def send_packet(packet, host='127.0.0.1', port=9000, timeout=5.0):
    """
    Send one packet and read the reply until the server hangs up.
    The reply carries no length or terminator, so EOF is the only end.
    """
    with closing(socket.create_connection((host, port), timeout)) as sock:
        sock.sendall(packet)
        chunks = []
        while True:
            chunk = sock.recv(RECV_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b''.join(chunks)
