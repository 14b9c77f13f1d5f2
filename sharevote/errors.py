class VoteError(Exception):
    """Base class for every rejected ballot operation.

    A raised VoteError means nothing was mutated. ``code`` is the stable
    identifier surfaced to API callers, ``status`` the HTTP status the
    ledger server answers with.
    """
    code = "VoteError"
    status = 400

    def __init__(self, message=None):
        self.message = message or (self.__doc__ or self.code).strip()
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class AlreadyInitialized(VoteError):
    """Account has already been initialized"""
    code = "AlreadyInitialized"
    status = 409


class InvalidPhase(VoteError):
    """Operation is not valid in the ballot's current phase"""
    code = "InvalidPhase"
    status = 409


class Unauthorized(VoteError):
    """Signer is not allowed to perform this operation"""
    code = "Unauthorized"
    status = 403


class AlreadyVoted(VoteError):
    """Voter has already voted"""
    code = "AlreadyVoted"
    status = 409


class InvalidShareIndex(VoteError):
    """Share index must be a non-zero element of the field"""
    code = "InvalidShareIndex"


class InvalidShareValue(VoteError):
    """Share value must be an element of the field"""
    code = "InvalidShareValue"


class DuplicateVoterIndex(VoteError):
    """A voter with this share index is already registered"""
    code = "DuplicateVoterIndex"
    status = 409


class DivisionByZero(VoteError):
    """Non-invertible element encountered"""
    code = "DivisionByZero"


class ReconstructionFailed(VoteError):
    """Shares do not reconstruct the committed secret"""
    code = "ReconstructionFailed"


class AlreadyApplied(VoteError):
    """Upgrade has already been applied"""
    code = "AlreadyApplied"
    status = 409


class NotAuthorized(VoteError):
    """Upgrade has not been approved"""
    code = "NotAuthorized"
    status = 403


class InvalidPolynomialDegree(VoteError):
    """Polynomial must have exactly threshold coefficients"""
    code = "InvalidPolynomialDegree"


class ContentTooLarge(VoteError):
    """Content is too large for the upgrade file"""
    code = "ContentTooLarge"
    status = 413


class InvalidThreshold(VoteError):
    """Threshold must be a positive integer"""
    code = "InvalidThreshold"


class InvalidVoterCount(VoteError):
    """Voter count must be a non-negative integer"""
    code = "InvalidVoterCount"


class ReplayedRequest(VoteError):
    """Request nonce has already been used"""
    code = "ReplayedRequest"
    status = 409


class UnknownAccount(VoteError):
    """Account not found"""
    code = "UnknownAccount"
    status = 404


class BadSignature(VoteError):
    """Request signature could not be verified"""
    code = "BadSignature"
    status = 401
