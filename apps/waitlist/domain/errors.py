from shared.domain.errors import FailedPreconditionError


class AlreadyWaitlistedError(FailedPreconditionError):
    def __init__(self, session_id, user_id) -> None:
        super().__init__("You are already on the waitlist for this session")
        self.session_id = session_id
        self.user_id = user_id
