from __future__ import annotations

from abc import ABC, abstractmethod


# This is the interface of every probe of the host
# its only use is to be able to mock a probe for testing and have a base type
class BaseEnvironment(ABC):
    @abstractmethod
    def detect(self) -> dict[str, int]:
        return {}

    @abstractmethod
    def dump(self) -> dict[str, int]:
        return {}
