import structlog

logger = structlog.get_logger(__name__)


class IOwnedRecords:
    def delete_for_user(self, user_id: int) -> int: ...


class IUserStore:
    def delete(self, user_id: int) -> bool: ...


class DeleteAccount:
    """Hard-delete a user; owned records go first, best effort."""

    def __init__(self, users: IUserStore, owned: list[IOwnedRecords]):
        self.users = users
        self.owned = owned

    def execute(self, user_id: int) -> bool:
        for store in self.owned:
            try:
                removed = store.delete_for_user(user_id)
            except Exception as exc:
                # the account itself is still removed
                logger.warning(
                    "account_cascade_failed",
                    user_id=user_id,
                    store=type(store).__name__,
                    error=str(exc),
                )
                continue
            logger.info("account_cascade", user_id=user_id, store=type(store).__name__, removed=removed)
        return self.users.delete(user_id)
