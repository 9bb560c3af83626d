from __future__ import annotations

from typing import Callable, List

from ..domain.entities import User
from ..repository.entity_repo import Repository


class UserService:
    def __init__(self, repository: Repository[User]):
        self.users = repository

    def get_all(self) -> List[User]:
        return self.users.get_all()

    def where(self, predicate: Callable[[User], bool]) -> List[str]:
        """Emails of the users matching predicate."""
        return [u.email for u in self.users.get_all() if predicate(u)]

    def stock_update_form_emails(self) -> List[str]:
        return self.where(lambda u: u.wants_log)

    def report_emails(self) -> List[str]:
        return self.where(lambda u: u.wants_report)

    def log_reply_emails(self) -> List[str]:
        return self.where(lambda u: u.wants_log_reply)

    def handle_user_form(self, user: User) -> bool:
        # a blank answer still overwrites the stored preference with False
        if self.users.has(user.email):
            self.users.update(user)
            return False
        self.users.add(user)
        return True

    def remove(self, email: str):
        self.users.remove(email)
