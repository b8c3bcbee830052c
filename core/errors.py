"""Error taxonomy for the card table core."""


class CardTableError(Exception):
    """Base class for all card table errors."""


class SupplyError(CardTableError):
    """Base class for card supply failures surfaced to callers."""


class SupplyUnavailable(SupplyError):
    """The remote supply could not be created, reshuffled or drawn from."""


class SupplyExhausted(SupplyError):
    """No cards left and the single replenishment attempt did not help."""


class IllegalTransition(CardTableError):
    """An action was requested in a state that does not permit it."""

    def __init__(self, action: str, state: object) -> None:
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} in state {state}")


class Busy(CardTableError):
    """A conflicting operation is already in flight."""


class StepCancelled(CardTableError):
    """A guarded step was cancelled before it could commit."""


class IndexOutOfRange(CardTableError, IndexError):
    """A card index does not exist in the hand."""
