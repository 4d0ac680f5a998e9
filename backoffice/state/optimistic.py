import copy
import logging

logger = logging.getLogger(__name__)


class OptimisticMutation:
    """
    Apply a local change before the remote call and undo it if the call fails.

        with OptimisticMutation(get_rows, set_rows, lambda rows: rows[1:]):
            resource.delete(record_id)

    The snapshot is restored when the block raises; the exception still
    propagates to the caller.
    """

    def __init__(self, get_state, set_state, change):
        self.get_state = get_state
        self.set_state = set_state
        self.change = change
        self.snapshot = None
        self.rolled_back = False

    def __enter__(self):
        self.snapshot = copy.deepcopy(self.get_state())
        self.set_state(self.change(copy.deepcopy(self.snapshot)))
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            logger.info(f"Rolling back optimistic change after {exc_type.__name__}")
            self.set_state(self.snapshot)
            self.rolled_back = True
        return False
