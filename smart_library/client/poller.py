import threading

from loguru import logger

from smart_library.client.api import ApiError

POLL_INTERVAL_SECONDS = 30


class UnreadCountPoller:
    """
    Refreshes the admin unread-notification badge on a fixed interval.

    `on_update` receives the count after every successful poll. Failed polls
    are logged and retried on the next tick.
    """

    def __init__(self, api, on_update, interval=POLL_INTERVAL_SECONDS):
        self.api = api
        self.on_update = on_update
        self.interval = interval
        self.count = 0
        self._stop = threading.Event()
        self._thread = None

    def poll(self):
        try:
            self.count = int(self.api.get_admin_unread_count()['count'])
        except ApiError as e:
            logger.warning('Unread count refresh failed: {}', e)
            return self.count
        self.on_update(self.count)
        return self.count

    def _run(self):
        while not self._stop.is_set():
            self.poll()
            self._stop.wait(self.interval)

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='unread-count-poller', daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.interval)
            self._thread = None
