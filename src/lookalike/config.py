from dataclasses import dataclass


@dataclass
class Settings:
    hash_size: int = 8
    phash_size: int = 32
    edge_grid_size: int = 8
    histogram_buckets: int = 256
    dominant_color_count: int = 5
    kmeans_max_iterations: int = 20
    kmeans_epsilon: float = 1.0
    kmeans_sample_limit: int = 4096
    compare_batch_size: int = 256
    threshold: float = 0.85
    workers: int = 1

    def __post_init__(self) -> None:
        for name in (
            "hash_size",
            "edge_grid_size",
            "histogram_buckets",
            "dominant_color_count",
            "kmeans_max_iterations",
            "kmeans_sample_limit",
            "compare_batch_size",
            "workers",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be a positive integer")
        if self.phash_size < self.hash_size:
            raise ValueError("phash_size must be at least hash_size")
        if not 1 <= self.histogram_buckets <= 256:
            raise ValueError("histogram_buckets must be between 1 and 256")
        if self.kmeans_epsilon < 0:
            raise ValueError("kmeans_epsilon must not be negative")
        if not 0.0 < self.threshold <= 1.0:
            raise ValueError("threshold must be in (0, 1]")

    def extraction_key(self) -> tuple:
        """Fields that shape a fingerprint; equal keys give comparable fingerprints."""
        return (
            self.hash_size,
            self.phash_size,
            self.edge_grid_size,
            self.histogram_buckets,
            self.dominant_color_count,
            self.kmeans_max_iterations,
            self.kmeans_epsilon,
            self.kmeans_sample_limit,
        )


DEFAULT_SETTINGS = Settings()
