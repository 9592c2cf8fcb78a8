"""Shared test constants and doubles."""

# Hardhat default signer addresses
OWNER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
ISSUER_A = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
ISSUER_B = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
ISSUER_C = "0x90f79bf6eb2c4f870365e785982e1f101e93b906"
SUBJECT = "0x1234567890123456789012345678901234567890"
OUTSIDER = "0x15d34aaf54267db7d7c367839aaf71a00a2c6a65"
ALL_ISSUERS = (ISSUER_A, ISSUER_B, ISSUER_C)

START_TIME = 1_700_000_000
ONE_DAY = 86400


def mixed_case(address: str) -> str:
    """Uppercase the hex digits of an address, keeping the 0x prefix."""
    return "0x" + address[2:].upper()


class ManualClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: int = START_TIME) -> None:
        self.current = start

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


class TickingClock(ManualClock):
    """Clock that moves one second forward on every read."""

    def now(self) -> int:
        current = self.current
        self.current += 1
        return current
