"""Test the preload coordinator against in-memory collaborators"""

import pytest

from conftest import CACHE_DIR, urls
from ytdl_preload.preload.coordinator import PreloadOptions
from ytdl_preload.preload.keys import KeyDeriver


def local(reference):
    return KeyDeriver(CACHE_DIR).target_path(reference)


class TestPreloading:
    """Queueing, serial downloads and swapping"""

    def test_queues_lookahead_window_and_downloads_one_at_a_time(self, make_coordinator, fetcher):
        refs = urls(8)
        coordinator, _ = make_coordinator(refs, position=0, limit=5)

        queued = coordinator.check_preload()

        assert queued == refs[1:6]
        assert fetcher.in_flight == [refs[1]]
        assert coordinator.status()['queued'] == 4

    def test_all_window_entries_swapped_in_order(self, make_coordinator, fetcher, notifier):
        refs = urls(8)
        coordinator, sequence = make_coordinator(refs, position=0, limit=5)
        coordinator.check_preload()

        for _ in range(5):
            fetcher.complete()

        assert sequence.entries[0] == refs[0]
        assert sequence.entries[1:6] == [local(ref) for ref in refs[1:6]]
        assert sequence.entries[6:] == refs[6:]
        assert sequence.position == 0
        assert fetcher.max_outstanding == 1
        assert notifier.messages == [f"Preloaded: Video {i}" for i in range(2, 7)]
        assert coordinator.status()['completed'] == 5
        assert coordinator.status()['state'] == 'idle'

    def test_rescan_does_not_queue_pending_references_twice(self, make_coordinator, fetcher):
        refs = urls(8)
        coordinator, _ = make_coordinator(refs)

        coordinator.check_preload()
        assert coordinator.check_preload() == []
        coordinator.on_length_changed()
        coordinator.on_position_changed()

        assert coordinator.status()['queued'] == 4
        assert len(fetcher.requests) == 1

    def test_local_entries_are_not_queued(self, make_coordinator):
        refs = urls(4)
        coordinator, _ = make_coordinator([refs[0], "/videos/local.mkv", refs[2], "C:\\videos\\b.mkv"])

        assert coordinator.check_preload() == [refs[2]]

    def test_cached_file_is_swapped_without_download(self, make_coordinator, fetcher, file_store, notifier):
        refs = urls(4)
        file_store.files.update({local(refs[1]), local(refs[2])})
        coordinator, sequence = make_coordinator(refs, limit=3)

        coordinator.check_preload()

        assert [request.reference for request in fetcher.requests] == [refs[3]]
        assert sequence.entries[1:3] == [local(refs[1]), local(refs[2])]
        assert notifier.messages == ["Preloaded: Video 2", "Preloaded: Video 3"]

    def test_nothing_playing_scans_from_first_entry(self, make_coordinator):
        refs = urls(4)
        coordinator, _ = make_coordinator(refs, position=None, limit=2)

        assert coordinator.check_preload() == refs[1:3]

    def test_empty_playlist_is_a_no_op(self, make_coordinator, fetcher):
        coordinator, _ = make_coordinator([])

        assert coordinator.check_preload() == []
        assert fetcher.requests == []

    def test_request_carries_format_options_and_trust(self, make_coordinator, fetcher):
        shared = "https://contoso.sharepoint.com/personal/me/video.mp4"
        coordinator, _ = make_coordinator(
            ["https://example.com/0", shared],
            format_selector="best[height<=720]",
            extra_options=["--cookies-from-browser=firefox", ""],
        )

        coordinator.check_preload()

        request = fetcher.requests[0]
        assert request.reference == shared
        assert request.destination == local(shared)
        assert request.format_selector == "best[height<=720]"
        assert request.extra_options == ["--cookies-from-browser=firefox"]
        assert request.relaxed_extension is True


class TestSwapEdgeCases:
    """Playlist changes while a download is in flight"""

    def test_entry_that_became_active_is_not_swapped(self, make_coordinator, fetcher, notifier):
        refs = urls(4)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.check_preload()

        sequence.play(1)
        fetcher.complete()

        assert sequence.entries[1] == refs[1]
        assert coordinator.ledger.paths() == [local(refs[1])]
        assert notifier.messages == []
        assert fetcher.in_flight == [refs[2]]

    def test_deferred_file_is_evictable_while_its_url_plays(self, make_coordinator, fetcher, file_store):
        refs = urls(5)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.check_preload()

        sequence.play(1)
        fetcher.complete()
        fetcher.complete()
        coordinator.on_file_started()
        assert fetcher.in_flight == [refs[3]]

        fetcher.complete()

        # Playback is on the remote URL, not the cached file
        assert file_store.deleted == [local(refs[1])]
        assert sequence.entries[1] == refs[1]
        assert sequence.position == 1
        assert coordinator.ledger.paths() == [local(refs[2]), local(refs[3])]

    def test_removed_entry_is_recorded_but_not_swapped(self, make_coordinator, fetcher, notifier):
        refs = urls(4)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.check_preload()

        sequence.remove_at(1)
        fetcher.complete()

        assert local(refs[1]) not in sequence.entries
        assert coordinator.ledger.paths() == [local(refs[1])]
        assert notifier.messages == []

    def test_entry_moved_during_download_is_found_by_value(self, make_coordinator, fetcher):
        refs = urls(5)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.check_preload()

        sequence.move_entry(1, 4)
        fetcher.complete()

        assert sequence.entries == [refs[0], refs[2], refs[3], local(refs[1]), refs[4]]

    def test_failed_download_is_dropped_and_requeued_by_later_scan(self, make_coordinator, fetcher, notifier):
        refs = urls(4)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.check_preload()

        fetcher.complete(success=False, exit_status=1)

        assert sequence.entries[1] == refs[1]
        assert coordinator.status()['failed'] == 1
        assert notifier.messages == [f"FAILED: {refs[1]}"]
        assert fetcher.in_flight == [refs[2]]
        assert coordinator.check_preload() == [refs[1]]


class TestEviction:
    """Cache ledger limit and the active-file barrier"""

    def test_oldest_file_evicted_once_playback_moves_past_it(self, make_coordinator, fetcher, file_store):
        refs = urls(8)
        coordinator, sequence = make_coordinator(refs, limit=5)
        coordinator.check_preload()
        for _ in range(5):
            fetcher.complete()

        sequence.play(1)
        coordinator.on_file_started()
        assert fetcher.in_flight == [refs[6]]

        fetcher.complete()
        # Over the limit, but the oldest file is the one playing
        assert len(coordinator.ledger) == 6
        assert file_store.deleted == []

        sequence.play(2)
        coordinator.on_file_started()

        assert file_store.deleted == [local(refs[1])]
        assert local(refs[1]) not in sequence.entries
        assert len(coordinator.ledger) == 5
        assert sequence.active_path() == local(refs[2])
        assert fetcher.in_flight == [refs[7]]

    def test_undeletable_file_still_leaves_ledger(self, make_coordinator, fetcher, file_store):
        refs = urls(5)
        coordinator, sequence = make_coordinator(refs, limit=1)
        coordinator.check_preload()
        fetcher.complete()
        file_store.undeletable.add(local(refs[1]))

        sequence.play(1)
        coordinator.on_file_started()
        fetcher.complete()
        sequence.play(2)
        coordinator.on_file_started()

        assert coordinator.ledger.paths() == [local(refs[2])]
        assert local(refs[1]) in file_store.files
        assert local(refs[1]) not in sequence.entries


class TestShutdown:
    """Cache cleanup when the player exits"""

    def test_shutdown_deletes_cache_files_only(self, make_coordinator, fetcher, file_store):
        refs = urls(4)
        unrelated = f"{CACHE_DIR}/notes.txt"
        file_store.files.add(unrelated)
        coordinator, _ = make_coordinator(refs, limit=2)
        coordinator.check_preload()
        fetcher.complete()

        deleted = coordinator.shutdown()

        assert deleted == 1
        assert file_store.files == {unrelated}
        assert len(coordinator.ledger) == 0

    def test_shutdown_is_idempotent_and_stops_scanning(self, make_coordinator, fetcher):
        refs = urls(6)
        coordinator, sequence = make_coordinator(refs, limit=2)
        coordinator.shutdown()

        assert coordinator.shutdown() == 0
        assert coordinator.check_preload() == []
        coordinator.on_file_started()
        assert fetcher.requests == []


class TestPreloadOptions:
    @pytest.mark.parametrize("limit", [0, -3, None, "5"])
    def test_unusable_limit_falls_back_to_default(self, limit):
        assert PreloadOptions(cache_dir=CACHE_DIR, limit=limit).limit == 5

    def test_from_settings(self, temp_dir):
        from ytdl_preload.config.settings import Settings

        settings = Settings()
        settings.preload.temp = str(temp_dir)
        settings.preload.ytdl_opt2 = "--limit-rate=2M"

        options = PreloadOptions.from_settings(settings)

        assert options.cache_dir == str(temp_dir)
        assert options.extra_options == ["--limit-rate=2M"]
        assert options.limit == 5
        assert "1drv.ms" in options.trusted_domains
