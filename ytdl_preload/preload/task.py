"""
Materialization task: turns one remote reference into a local file
"""

from typing import Callable, List

from .interfaces import FetchRequest, FetchResult, Fetcher, FileStore, Notifier
from .keys import KeyDeriver
from .swap import SwapCoordinator
from .trust import TrustPolicy
from ..exceptions import PreloadError
from ..utils.helpers import truncate_string
from ..utils.logger import get_logger


TaskDone = Callable[[bool], None]

MAX_PASSTHROUGH_OPTIONS = 2


class MaterializationTask:
    """
    Downloads a reference (unless its cache file already exists) and swaps it in

    A failed download is logged and dropped. There is no retry: the
    reference leaves the pending set, so it is only queued again if a later
    window scan still finds it as a remote entry.
    """

    def __init__(
        self,
        key_deriver: KeyDeriver,
        file_store: FileStore,
        fetcher: Fetcher,
        trust_policy: TrustPolicy,
        swap: SwapCoordinator,
        notifier: Notifier,
        format_selector: str,
        extra_options: List[str]
    ):
        self.key_deriver = key_deriver
        self.file_store = file_store
        self.fetcher = fetcher
        self.trust_policy = trust_policy
        self.swap = swap
        self.notifier = notifier
        self.format_selector = format_selector
        self.extra_options = [opt for opt in extra_options if opt][:MAX_PASSTHROUGH_OPTIONS]
        self.logger = get_logger(__name__)

    def build_request(self, reference: str) -> FetchRequest:
        return FetchRequest(
            reference=reference,
            destination=self.key_deriver.target_path(reference),
            format_selector=self.format_selector,
            extra_options=list(self.extra_options),
            relaxed_extension=self.trust_policy.is_trusted(reference),
        )

    def run(self, reference: str, done: TaskDone) -> None:
        """
        Materialize reference and call done(success) exactly once

        Args:
            reference: Remote URL to materialize
            done: Completion callback for the scheduler
        """
        target = self.key_deriver.target_path(reference)

        if self.file_store.exists(target):
            self.logger.info("File exists, swapping immediately.")
            try:
                self._swap(reference, target)
            finally:
                done(True)
            return

        request = self.build_request(reference)
        self.logger.info(f"Downloading: {reference}")

        def on_result(result: FetchResult) -> None:
            try:
                if result.success:
                    self.logger.info(f"Finished: {self.key_deriver.filename(reference)}")
                    self._swap(reference, target)
                else:
                    detail = result.error_message or f"exit status {result.exit_status}"
                    self.logger.warning(f"FAILED: {reference} ({detail})")
                    self.notifier.info(f"FAILED: {truncate_string(reference, 80)}")
            finally:
                done(result.success)

        self.fetcher.fetch_async(request, on_result)

    def _swap(self, reference: str, target: str) -> None:
        try:
            self.swap.swap(reference, target)
        except PreloadError as e:
            # Player went away or rejected the edit; the file stays for shutdown cleanup
            self.logger.warning(f"Swap failed for {reference}: {e}")
