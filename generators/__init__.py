from .data_factory import WorkloadGenerator

__all__ = ["WorkloadGenerator"]
