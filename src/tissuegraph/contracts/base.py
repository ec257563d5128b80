"""The one check every contract goes through."""

from tissuegraph.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ``ContractViolation(message)`` unless ``condition`` holds.

    Parameters
    ----------
    condition : bool
        Structural property to check.
    message : str
        Error message naming the frame or cell at fault.

    Examples
    --------
    >>> require(0 <= t < st_graph.size(), f"frame {t} out of range")
    >>> require(st_graph.has_tracking(), "Edge tracking requires cell tracking")
    """
    if not condition:
        raise ContractViolation(message)
