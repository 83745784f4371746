from dataclasses import dataclass


@dataclass(frozen=True)
class ActualDraftPick:
    overall: int
    round: int
    pick: int
    roster_id: int
    player_id: str
    player_name: str
    position: str
    manager: str
