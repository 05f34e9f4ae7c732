from dataclasses import dataclass


@dataclass(frozen=True)
class StatusRecord:
    name: str
    phone: str
    status: str  # "yes" | "no"
