"""Audit record returned by an entity demolition."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....database.transactions import DeleteTransaction
from ...entities.entities.entity import Entity
from ...users.entities.user import User


@dataclass
class DemolitionRecord:
    """What a demolition deleted, or would have deleted in a dry run."""

    entity_id: str
    entity: Optional[Entity]
    transaction: DeleteTransaction
    deleted_users: List[User] = field(default_factory=list)
    deleted_accounts: List[str] = field(default_factory=list)
    failed_accounts: Dict[str, str] = field(default_factory=dict)
    notified: List[str] = field(default_factory=list)
    dry_run: bool = False
    run_id: Optional[str] = None

    @property
    def found_anything(self) -> bool:
        return self.entity is not None or len(self.transaction) > 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "databaseCommandInput": self.transaction.to_dict(),
            "deletedUsers": [user.to_dict() for user in self.deleted_users],
            "deletedAccounts": list(self.deleted_accounts),
            "failedAccounts": dict(self.failed_accounts),
            "notified": list(self.notified),
            "dryRun": self.dry_run,
        }
