from .log import log, ERR, INFO


SEND_SIZE = 1024


def send_all(connection, store, shutdown, peer=None, send_size=SEND_SIZE):
    """
    Stream the whole log to `connection`.  Returns True when every byte
    went out.
    """
    try:
        f = store.open()
    except OSError as e:
        log(ERR, 'Failed to open %s for reading: %s' % (store.path,
                                                         e.strerror))
        return False

    with f:
        while True:
            try:
                chunk = f.read(send_size)
            except OSError as e:
                log(ERR, 'Failed to read %s: %s' % (store.path, e.strerror))
                return False
            if not chunk:
                return True

            view = memoryview(chunk)
            while view:
                try:
                    if not shutdown.wait_writable(connection):
                        log(INFO, 'Reply to %s cut short by shutdown' % peer)
                        return False
                    sent = connection.send(view)
                except OSError as e:
                    log(ERR, 'Error sending data to %s: %s' % (peer,
                                                               e.strerror))
                    return False
                view = view[sent:]
