"""Domain models for USSD menu replies."""

from dataclasses import dataclass

CONTINUE_PREFIX = "CON"
END_PREFIX = "END"


@dataclass(frozen=True)
class UssdReply:
    """Screen text plus whether the dialog ends after it is shown."""

    text: str
    terminal: bool = False

    @classmethod
    def con(cls, text: str) -> "UssdReply":
        """Build a reply that keeps the dialog open."""
        return cls(text=text, terminal=False)

    @classmethod
    def end(cls, text: str) -> "UssdReply":
        """Build a reply that closes the dialog."""
        return cls(text=text, terminal=True)

    def render(self) -> str:
        """Serialize to the gateway's CON/END wire convention."""
        prefix = END_PREFIX if self.terminal else CONTINUE_PREFIX
        return f"{prefix} {self.text}"
