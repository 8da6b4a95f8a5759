"""
Concurrency tests for IpAllocator.
"""

import threading

import pytest

from ipam_engine.allocator import IpAllocator
from ipam_engine.exceptions import PoolExhausted


@pytest.mark.unit
class TestConcurrentAllocation:
    def test_concurrent_get_ip_unique(self):
        ipa = IpAllocator()
        ipa.add_range("10.0.0.0", "10.0.3.255")
        results = []
        results_lock = threading.Lock()

        def worker():
            local = [ipa.get_ip() for _ in range(100)]
            with results_lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 800
        assert len(set(results)) == 800
        assert ipa.free_count() == 1024 - 800

    def test_concurrent_exhaustion(self):
        ipa = IpAllocator()
        ipa.add_range("10.0.0.1", "10.0.0.50")
        allocated = []
        failures = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                try:
                    ip = ipa.get_ip()
                except PoolExhausted:
                    with lock:
                        failures.append(1)
                    continue
                with lock:
                    allocated.append(ip)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(allocated)) == 50
        assert len(failures) == 50
        assert ipa.free_list() == []

    def test_concurrent_allocate_and_release(self):
        ipa = IpAllocator()
        ipa.add_range("10.0.0.0", "10.0.15.255")

        def worker():
            for _ in range(50):
                chunk = ipa.get_ip_chunk()
                ip = ipa.get_ip()
                ipa.release_ip(ip)
                for r in chunk:
                    ipa.add_range(r.start, r.end)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [str(r) for r in ipa.free_list()] == ["10.0.0.0-10.0.15.255"]
