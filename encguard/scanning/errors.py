"""Exception taxonomy for the scanning engine."""


class EncGuardError(Exception):
    """Base class for scanning engine errors."""


class TypeMismatch(EncGuardError):
    """File content and claimed extension belong to unrelated type families."""

    def __init__(self, extension: str, signature: str, claimed_groups=None, detected_groups=None):
        self.extension = extension
        self.signature = signature
        self.claimed_groups = list(claimed_groups or [])
        self.detected_groups = list(detected_groups or [])
        super().__init__(
            f"Content signature '{signature}' ({', '.join(self.detected_groups) or 'no groups'}) "
            f"does not match extension '.{extension}' ({', '.join(self.claimed_groups) or 'no groups'})"
        )


class ProbeUnavailable(EncGuardError, FileNotFoundError):
    """An external tool a probe depends on cannot be found or executed."""


class ProbeFault(EncGuardError):
    """Unexpected failure while a probe was running."""
