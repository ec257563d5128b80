"""Exception raised by graph and stage contracts."""


class ContractViolation(RuntimeError):
    """A graph or stage precondition does not hold.

    Raised for broken input structure: a missing frame, mismatching frame
    numbers, a cell without polygon geometry, duplicate track IDs, or a
    stage run out of order. Caller misuse of pure helpers raises
    ``ValueError`` instead, and ambiguous tracking outcomes are recorded as
    ``TrackStatus`` codes on the cells.
    """
