from ...exceptions import MementoDBError


class ChaosException(MementoDBError):
    """Failure injected into a store operation by the chaos layer."""

    def __str__(self):
        return f"ChaosException: {self.message}"
