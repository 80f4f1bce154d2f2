# finbot/outputs/base.py
from abc import ABC, abstractmethod

class BaseOutput(ABC):
    @abstractmethod
    def write(self, transactions):
        """Export transactions to the chosen sink and return the written path."""
        pass
