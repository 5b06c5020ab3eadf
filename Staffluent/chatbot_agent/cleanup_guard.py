import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class CleanupGuard:
    """
    Runs a cleanup callable once per process.

    The flag is best-effort: two requests racing past the check can both run
    the callable, which the cleanup tolerates. It is marked done even when
    the cleanup fails so a broken store does not cause retries on every
    message.
    """

    def __init__(self):
        self.cleaned_once = False

    def run_once(self, cleanup: Callable[[], int]) -> Dict:
        if self.cleaned_once:
            return {'success': True, 'skipped': True}

        try:
            deleted = cleanup()
            result = {'success': True, 'deleted': deleted or 0}
            logger.info("Removed %s off-topic learned responses", result['deleted'])
        except Exception as e:
            result = {'success': False, 'error': str(e)}
            logger.warning("Learned response cleanup failed: %s", e)
        finally:
            self.cleaned_once = True

        return result

    def reset(self):
        self.cleaned_once = False


# Shared by every chatbot service in the process
default_cleanup_guard = CleanupGuard()
