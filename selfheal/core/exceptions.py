class HealingError(RuntimeError):
    """Raised when an element cannot be resolved or healed."""


class ElementNotFoundError(HealingError):
    """Raised when a locator cannot be resolved and healing is not available."""

    def __init__(self, locator: str, match_count: int = 0, *, healing_disabled: bool = False) -> None:
        self.locator = locator
        self.match_count = match_count
        self.healing_disabled = healing_disabled
        detail = f"matched {match_count} elements" if match_count > 1 else "matched no element"
        if healing_disabled:
            detail += ", self-healing disabled"
        super().__init__(f"Element not found: {locator} ({detail})")


class NoFingerprintError(HealingError):
    """Raised when healing is attempted for a name that was never resolved."""

    def __init__(self, element_name: str, locator: str) -> None:
        self.element_name = element_name
        self.locator = locator
        super().__init__(
            f'Element "{element_name}" not found and no fingerprint available for self-healing. '
            f"Original locator: {locator}"
        )


class LowConfidenceError(HealingError):
    """Raised when the best healing candidate scores below the threshold."""

    def __init__(self, element_name: str, confidence: float, threshold: float) -> None:
        self.element_name = element_name
        self.confidence = confidence
        self.threshold = threshold
        super().__init__(
            f'Self-healing failed for "{element_name}". '
            f"Best match confidence: {confidence * 100:.1f}% "
            f"(threshold: {threshold * 100:.1f}%)"
        )
