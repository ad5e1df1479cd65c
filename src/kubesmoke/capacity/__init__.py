"""Expected worker capacity extraction from stack resources."""

from kubesmoke.capacity.extractor import extract_expected_capacity, load_stack_resources
from kubesmoke.capacity.naming import TagValueNamingStrategy, WorkerTagNamingStrategy

__all__ = [
    "TagValueNamingStrategy",
    "WorkerTagNamingStrategy",
    "extract_expected_capacity",
    "load_stack_resources",
]
