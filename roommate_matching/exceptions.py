class MatchingError(Exception):
    """Base class for errors raised by the matching and roommate services"""

    status_code = 400
    default_message = 'Matching operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(MatchingError):
    status_code = 404
    default_message = 'Not found'


class SelfActionError(MatchingError):
    default_message = 'You cannot act on your own profile'


class SelfRequestError(MatchingError):
    default_message = 'Cannot send a roommate request to yourself'


class DuplicateActionError(MatchingError):
    status_code = 409
    default_message = 'You already acted on this profile'


class DuplicateRequestError(MatchingError):
    status_code = 409
    default_message = 'You already have a pending request to this user'


class AlreadyRelatedError(MatchingError):
    status_code = 409
    default_message = 'An active roommate relationship already exists'


class InvalidStateError(MatchingError):
    default_message = 'This request has already been processed'
