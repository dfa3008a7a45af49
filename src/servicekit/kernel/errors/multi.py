"""MultiError – accumulate errors while preserving their behaviours."""

from __future__ import annotations

from servicekit.kernel.errors.behaviors import classify


class MultiError(Exception):
    """Container for several errors; a trait is on when any member has it."""

    def __init__(self) -> None:
        super().__init__()
        self.errors: list[BaseException] = []
        self.conflict = False
        self.exists = False
        self.not_found = False
        self.retryable = False
        self.temporary = False

    def add(self, err: BaseException) -> None:
        self.errors.append(err)
        traits = classify(err)
        self.conflict = self.conflict or traits.conflict
        self.exists = self.exists or traits.exists
        self.not_found = self.not_found or traits.not_found
        self.retryable = self.retryable or traits.retryable
        self.temporary = self.temporary or traits.temporary

    def __str__(self) -> str:
        return ": ".join(str(e) for e in self.errors)

    def __len__(self) -> int:
        return len(self.errors)


def append(old: BaseException | None, new: BaseException | None) -> BaseException | None:
    """Add *new* to the (possibly ``None``) accumulated error *old*."""
    if old is None and new is None:
        return None
    if isinstance(old, MultiError):
        merr = old
    else:
        merr = MultiError()
        if old is not None:
            merr.add(old)
    if new is not None:
        merr.add(new)
    return merr


__all__ = ["MultiError", "append"]
