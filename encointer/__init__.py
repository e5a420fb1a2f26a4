"""Community currency logic: meetup assignment and validation, fixed-point demurrage balances, fees and a bazaar."""

__version__ = "1.0.0"

__all__ = [
    "assignment",
    "balances",
    "bazaar",
    "fees",
    "fixed",
    "math",
    "meetup_validation",
]