# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks memory usage, stage timings and throughput of a pipeline run.
"""

import time
import os
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

import psutil

logger = logging.getLogger(__name__)

class PerformanceMonitor:
    """
    Performance monitoring utility for the pipeline.
    Tracks memory usage, processing time, and throughput.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.chunks_processed = 0
        self.checkpoints = []
        self.summary = {}
        self._process = psutil.Process(os.getpid())

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.info(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def update_progress(self, records_in_chunk: int) -> None:
        """
        Update progress tracking.

        Args:
            records_in_chunk (int): Number of records read in this chunk
        """
        self.records_processed += records_in_chunk
        self.chunks_processed += 1
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)

        if self.chunks_processed % 100 == 0:
            self._log_progress(current_memory)

    def add_checkpoint(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Add a performance checkpoint, e.g. at the end of a pipeline stage.

        Args:
            name (str): Checkpoint name
            metadata (dict): Optional metadata to store
        """
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)
        checkpoint = {
            'name': name,
            'elapsed_seconds': time.time() - self.start_time if self.start_time else 0.0,
            'memory_mb': current_memory,
            'records_processed': self.records_processed,
            'metadata': metadata or {}
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def _log_progress(self, current_memory: float) -> None:
        """Log current progress."""
        if self.start_time:
            elapsed = time.time() - self.start_time
            throughput = self.records_processed / elapsed if elapsed > 0 else 0

            logger.info(
                f"{self.name} - Progress: {self.chunks_processed} chunks, "
                f"{self.records_processed:,} records, "
                f"{throughput:.0f} records/sec, "
                f"Memory: {current_memory:.2f} MB"
            )

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        total_time = self.end_time - self.start_time if self.start_time else 0
        throughput = self.records_processed / total_time if total_time > 0 else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'records_processed': self.records_processed,
            'chunks_processed': self.chunks_processed,
            'average_throughput_records_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints
        }

        logger.info(
            f"{self.name} - {self.records_processed:,} records in {total_time:.2f}s "
            f"({throughput:.0f} records/sec), peak memory {self.peak_memory_mb:.2f} MB"
        )
        self.summary = summary
        return summary

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory usage in MB."""
        memory_bytes = self._process.memory_info().rss
        return memory_bytes / (1024 * 1024)

    def get_current_stats(self) -> Dict[str, Any]:
        """Get current performance statistics."""
        elapsed = time.time() - self.start_time if self.start_time else 0

        return {
            'elapsed_seconds': elapsed,
            'records_processed': self.records_processed,
            'chunks_processed': self.chunks_processed,
            'current_memory_mb': self._get_memory_usage_mb(),
            'peak_memory_mb': self.peak_memory_mb,
            'current_throughput': self.records_processed / elapsed if elapsed > 0 else 0
        }

@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.stop_monitoring()
